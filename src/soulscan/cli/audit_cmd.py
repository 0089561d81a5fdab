"""soulscan audit — audit trail commands."""

import csv
import io
import json

import click

from soulscan.audit.logger import AuditLogger
from soulscan.audit.verifier import AuditVerifier
from soulscan.cli.main import cli
from soulscan.config import DataPaths


def verify_audit_log(paths: DataPaths) -> None:
    """Verify the chain, exiting 1 if it is broken."""
    if not paths.audit_log.exists():
        click.echo(f"No audit log found at {paths.audit_log}")
        return

    result = AuditVerifier().verify(paths.audit_log)

    if result.valid:
        click.echo(f"Audit log verified: {result.entries_checked} entries, chain intact.")
    else:
        click.secho(f"VERIFICATION FAILED at entry {result.first_broken_index}", fg="red", bold=True)
        click.echo(f"Error: {result.first_error}")
        raise SystemExit(1)


def show_audit_log(paths: DataPaths, n: int) -> None:
    """Print the last n entries, oldest first."""
    if not paths.audit_log.exists():
        click.echo(f"No audit log found at {paths.audit_log}")
        return

    for entry in AuditLogger(paths.audit_log).recent(n):
        score = "offline" if entry.scan_score is None else f"score {entry.scan_score:g}"
        click.echo(
            f"  {entry.timestamp.isoformat()[:19]}  {entry.action:<8} "
            f"{entry.files_scanned} files  {score}"
        )
        if entry.drift_detected:
            click.echo(f"    drift: {', '.join(entry.drift_detected)}")
        if entry.restored:
            click.echo(f"    restored: {', '.join(entry.restored)}")


@cli.group()
def audit() -> None:
    """Audit trail commands."""


@audit.command()
@click.pass_obj
def verify(paths: DataPaths) -> None:
    """Verify audit log hash chain integrity."""
    verify_audit_log(paths)


@audit.command()
@click.option("--last", "n", default=20, type=int, help="Number of entries to show")
@click.pass_obj
def show(paths: DataPaths, n: int) -> None:
    """Print recent audit entries."""
    show_audit_log(paths, n)


@audit.command()
@click.option("--format", "fmt", default="json", type=click.Choice(["json", "csv"]))
@click.option("--output", "output_path", default=None, help="Output file path")
@click.pass_obj
def export(paths: DataPaths, fmt: str, output_path: str | None) -> None:
    """Export audit log to JSON or CSV."""
    if not paths.audit_log.exists():
        click.echo(f"No audit log found at {paths.audit_log}")
        return

    entries = AuditLogger(paths.audit_log).read_entries()

    if fmt == "json":
        data = [e.model_dump(mode="json") for e in entries]
        content = json.dumps(data, indent=2)
    else:
        output = io.StringIO()
        if entries:
            fields = list(entries[0].model_dump().keys())
            writer = csv.DictWriter(output, fieldnames=fields)
            writer.writeheader()
            for entry in entries:
                row = entry.model_dump(mode="json")
                row["drift_detected"] = ";".join(row["drift_detected"])
                row["restored"] = ";".join(row["restored"])
                writer.writerow(row)
        content = output.getvalue()

    if output_path:
        with open(output_path, "w") as f:
            f.write(content)
        click.echo(f"Exported {len(entries)} entries to {output_path}")
    else:
        click.echo(content)
