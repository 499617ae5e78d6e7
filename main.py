#!/usr/bin/env python3
"""Main entry point for the Scream Detection feature pipeline.

Simplified entry point that delegates to the CLI module.

Usage:
    python main.py info                     # Show working parameters
    python main.py extract clip.wav         # Print the feature vector
    python main.py classify clip.wav -m m.pkl
    python main.py batch recordings/ -o features.npz

Or use the CLI directly:
    python -m scream_detection extract clip.wav
"""

import sys
from pathlib import Path


def main():
    """Main entry point - delegates to CLI."""
    # If no arguments, show help
    if len(sys.argv) == 1:
        print(__doc__)
        print("Run 'python main.py --help' for more options")
        sys.exit(0)

    sys.path.insert(0, str(Path(__file__).parent / "src"))
    from scream_detection.cli import main as cli_main
    cli_main()


if __name__ == "__main__":
    main()
