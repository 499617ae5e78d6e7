"""Allow running as ``python -m scream_detection``."""

from .cli import main

if __name__ == "__main__":
    main()
