"""soulscan scan — integrity check, optional restore, validation and audit."""

import json
from pathlib import Path

import click

from soulscan.cli.audit_cmd import show_audit_log, verify_audit_log
from soulscan.cli.main import cli
from soulscan.config import DataPaths, load_config
from soulscan.errors import SoulScanError
from soulscan.scanner import ScanOptions, ScanOrchestrator, ScanResult
from soulscan.validation.client import ValidationReport
from soulscan.workspace import PLATFORMS, WorkspaceLocator


@cli.command()
@click.argument("directory", required=False, type=click.Path(file_okay=False, path_type=Path))
@click.option("-q", "--quiet", is_flag=True, help="One-line output for cron jobs")
@click.option("--init", "init_", is_flag=True, help="Re-initialize checksums and baseline")
@click.option("--restore", is_flag=True, help="Roll back restore-protected files from baseline")
@click.option("--approve", is_flag=True, help="Accept current files as the new baseline")
@click.option("--report", is_flag=True, help="Print the scan result as JSON")
@click.option("--verify-audit", is_flag=True, help="Only verify the audit log hash chain")
@click.option("--audit-log", "audit_last", type=int, default=None, help="Only print the last N audit entries")
@click.option("--platform", type=click.Choice(PLATFORMS), default=None, help="Agent platform override")
@click.option("--offline", is_flag=True, help="Skip the remote validation service")
@click.pass_obj
def scan(
    paths: DataPaths,
    directory: Path | None,
    quiet: bool,
    init_: bool,
    restore: bool,
    approve: bool,
    report: bool,
    verify_audit: bool,
    audit_last: int | None,
    platform: str | None,
    offline: bool,
) -> None:
    """Scan a workspace for tampered persona files."""
    if verify_audit:
        verify_audit_log(paths)
        return
    if audit_last is not None:
        show_audit_log(paths, audit_last)
        return

    try:
        config = load_config(paths)
        locator = WorkspaceLocator(platform or config.platform)
        orchestrator = ScanOrchestrator(paths, config, locator)
        if not quiet and not report:
            click.secho(f"\nSoulScan — scanning {locator.locate(directory)}\n", bold=True)
        result = orchestrator.scan(
            directory,
            ScanOptions(init=init_, restore=restore, approve=approve, offline=offline),
        )
    except SoulScanError as e:
        click.secho(f"Error: {e}", fg="red", err=True)
        raise SystemExit(1) from e

    if report:
        data = result.model_dump(mode="json")
        data["failed"] = result.failed
        click.echo(json.dumps(data, indent=2))
    elif quiet:
        _print_quiet(result)
    else:
        _print_result(result)

    raise SystemExit(result.exit_code)


def _print_quiet(result: ScanResult) -> None:
    suffix = " (offline)" if result.offline else ""
    if not result.failed:
        click.echo(f"SOULSCAN_OK{suffix}")
        return
    parts = []
    if result.drift.unresolved:
        parts.append("TAMPERED")
    if result.validation is not None:
        parts.append(f"{result.validation.errors} errors, {result.validation.warnings} warnings")
    click.echo(f"SOULSCAN_ALERT: {' '.join(parts)}{suffix}")


def _print_result(result: ScanResult) -> None:
    drift = result.drift
    if result.files_scanned == 0:
        click.secho("No soul files found in workspace.", fg="yellow")
        return

    click.secho(f"   Found {result.files_scanned} soul files\n", dim=True)

    if drift.initialized:
        click.secho("   Initialized baseline checksums and snapshots\n", dim=True)
    elif result.action == "approve":
        click.secho("Approved current files as the new baseline", fg="green")
        for detail in drift.details:
            click.echo(f"   - {detail}")
        click.echo()
    elif drift.tampered:
        click.secho("INTEGRITY ALERT — files changed since last scan:", fg="red", bold=True)
        for detail in drift.details:
            click.secho(f"   - {detail}", fg="red")
        click.echo()
    elif drift.details:
        for detail in drift.details:
            click.secho(f"   ℹ {detail}", fg="yellow")
        click.echo()
    else:
        click.secho("Integrity check passed — no changes detected\n", fg="green")

    if result.validation is None:
        click.secho("Validation service skipped, local integrity check only", fg="yellow")
    else:
        _print_checks(result.validation)


def _print_checks(report: ValidationReport) -> None:
    colors = {"pass": "green", "fail": "red", "warn": "yellow"}
    for check in report.checks:
        click.secho(f"[{check.type}] {check.message}", fg=colors[check.type])
        for detail in check.details or []:
            click.secho(f"   - {detail}", fg=colors[check.type])

    click.echo()
    if report.errors:
        click.secho(
            f"SoulScan result: {report.errors} error(s), {report.warnings} warning(s)",
            fg="red",
            bold=True,
        )
    else:
        click.secho(
            f"SoulScan: PASS — {report.passed} passed, {report.warnings} warning(s)",
            fg="green",
            bold=True,
        )
