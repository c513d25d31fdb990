"""Main entry point for the vnscript CLI when run as a module."""

from vnscript.cli.main import main

if __name__ == "__main__":  # pragma: no cover
    main()
