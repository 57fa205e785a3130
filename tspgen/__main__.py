# File: tspgen/__main__.py
"""
TSPGen — Module entry point.

Allows running the generator directly via::

    python -m tspgen db/schema.rb --output ./typespec

This module simply delegates to the CLI entry point defined in ``tspgen.cli``.
"""

from __future__ import annotations


def main() -> None:
    """Delegate to the CLI main function."""
    from tspgen.cli import cli_main
    cli_main()


if __name__ == "__main__":
    main()
