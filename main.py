#!/usr/bin/env python3
# PYTHON_ARGCOMPLETE_OK
import sys

from rona.cli import main

if __name__ == "__main__":
    sys.exit(main())
