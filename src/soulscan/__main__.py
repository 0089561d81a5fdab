"""CLI entrypoint for SoulScan."""

import soulscan.cli.audit_cmd  # noqa: F401
import soulscan.cli.baseline_cmd  # noqa: F401
import soulscan.cli.scan_cmd  # noqa: F401
from soulscan.cli.main import cli


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
