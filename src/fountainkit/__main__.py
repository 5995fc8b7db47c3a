"""Allow running as ``python -m fountainkit``."""

from fountainkit.cli.main import main

if __name__ == "__main__":
    main()
