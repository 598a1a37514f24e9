"""Entry point: python main.py <command> ...  (same as the blogstore console script)."""

import sys

from blogstore.cli import main

if __name__ == "__main__":
    sys.exit(main())
