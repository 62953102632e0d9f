#!/usr/bin/env python3
"""Main entry point for clocksync package."""

import sys
from clocksync.cli import main

if __name__ == "__main__":
    sys.exit(main())
