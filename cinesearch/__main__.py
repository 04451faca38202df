"""
Entry point for running CineSearch as a module.

Usage:
    python -m cinesearch <command>
"""

import sys

from .cli import main

if __name__ == "__main__":
    sys.exit(main())
