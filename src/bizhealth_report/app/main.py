"""Console entry point for the bizhealth-report command."""
from __future__ import annotations

from bizhealth_report.cli.commands import app


def main() -> None:
    """Invoke the Typer application."""
    app()


if __name__ == "__main__":
    main()
