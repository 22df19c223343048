"""Entry point for ``python -m agent_spaces`` and frozen builds."""

from __future__ import annotations

import sys


def main() -> None:
    """Launch the GUI when started without arguments."""
    if getattr(sys, "frozen", False) or len(sys.argv) == 1:
        # Set sys.argv so typer dispatches to the gui command.
        sys.argv = [sys.argv[0], "gui"]

    from agent_spaces.cli.commands import app

    app()


if __name__ == "__main__":
    main()
