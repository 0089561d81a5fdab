"""Click CLI group for SoulScan."""

import logging
from pathlib import Path

import click

from soulscan.config import DataPaths, resolve_data_dir


@click.group()
@click.version_option(package_name="soulscan")
@click.option(
    "--data-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Private data directory (default: $SOULSCAN_DIR or ~/.clawsouls/soulscan)",
)
@click.option("-v", "--verbose", is_flag=True, help="Debug logging")
@click.pass_context
def cli(ctx: click.Context, data_dir: Path | None, verbose: bool) -> None:
    """SoulScan — tamper detection and audit trail for agent persona files."""
    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=logging.WARNING,
    )
    if verbose:
        logging.getLogger("soulscan").setLevel(logging.DEBUG)
    ctx.obj = DataPaths(resolve_data_dir(data_dir))
