"""Module entry point for running the dashboard via ``python -m ffiii_tui``.

The click group sets up logging and configuration before the curses session
starts, so the console is still available for configuration errors.
"""

from .cli import main


def entry_point() -> None:
    """Run the ``ffiii-tui`` command."""
    main()


if __name__ == "__main__":  # pragma: no cover - manual execution entry
    entry_point()
