"""ogpeek CLI entry point.

Delegates to ``ogpeek.cli`` which houses the Click command.
Kept minimal so that ``python -m ogpeek`` and the ``ogpeek``
console-script entry point both resolve here.
"""

from __future__ import annotations

from ogpeek.cli import cli


def main() -> None:
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
