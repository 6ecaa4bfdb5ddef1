"""
Main entry point for the Citadels console game.
Run: python main.py --help
"""

import sys

from citadels.cli import main

if __name__ == "__main__":
    sys.exit(main())
