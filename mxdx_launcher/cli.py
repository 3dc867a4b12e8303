"""Command-line entry point for the launcher."""

from __future__ import annotations

import argparse
import sys
from collections.abc import Sequence

_VERSION = "1.0.0"


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mxdx-launcher",
        description="Matrix-native fleet management launcher",
    )
    parser.add_argument(
        "-V", "--version", action="version", version=f"%(prog)s {_VERSION}"
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Parse arguments and start the launcher."""
    _parser().parse_args(argv)
    sys.stdout.write("mxdx-launcher starting...\n")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())