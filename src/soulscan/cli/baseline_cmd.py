"""soulscan baseline — inspect stored snapshots."""

import click

from soulscan.cli.main import cli
from soulscan.config import DataPaths
from soulscan.integrity.baseline import BaselineStore


@cli.group()
def baseline() -> None:
    """Baseline snapshot commands."""


@baseline.command()
@click.pass_obj
def status(paths: DataPaths) -> None:
    """List baseline snapshots and whether each is intact."""
    store = BaselineStore(paths.baseline_dir)
    index = store.load_index()
    if index is None:
        click.echo(f"No baseline found at {paths.baseline_dir}. Run: soulscan scan --init")
        return

    click.echo(f"Baseline captured {index.captured_at.isoformat()[:19]}")
    corrupt = False
    for name, intact in store.status().items():
        if intact:
            click.echo(f"  ✓ {name}")
        else:
            corrupt = True
            click.secho(f"  ✗ {name} (snapshot missing or corrupt)", fg="red")
    if corrupt:
        raise SystemExit(1)
