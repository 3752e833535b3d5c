"""Project root entry point for the translation API command line."""

import sys

from transapi.cli import main

if __name__ == "__main__":
    sys.exit(main())
