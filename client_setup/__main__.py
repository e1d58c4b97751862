#!/usr/bin/env python3
"""
Entry point for running the setup step as a module.

Usage:
    python -m client_setup                  # Show available commands
    python -m client_setup deploy           # Full client contract setup
    python -m client_setup extract-address temp_client_build
"""
from client_setup.setup.cli import main


if __name__ == "__main__":
    raise SystemExit(main())
