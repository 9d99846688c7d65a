#!/usr/bin/env python3
"""
PactStub - HTTP stub server for pact contracts

This is a convenience wrapper that calls the packaged CLI.
The actual implementation is in src/pactstub/cli.py

Usage:
    python pactstub-server.py serve consumer-provider.json --port 9000

Run with --help for the available commands.
"""

import sys
from pathlib import Path

# Add src to the path
sys.path.insert(0, str(Path(__file__).parent / "src"))

from pactstub.cli import main

if __name__ == '__main__':
    main()
