#!/usr/bin/env python3
"""Run the morphic command line interface with `python -m morphic`."""

import sys

from morphic.cli import main


if __name__ == "__main__":
    sys.exit(main())
