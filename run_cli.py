#!/usr/bin/env python3
"""CLI entry point for the Ollama tool loop."""

import asyncio
import sys
import os

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from agent.config import load_config
from cli.cli_app import CLIApp


def main():
    if len(sys.argv) < 2:
        print("Usage: run_cli.py <message> [config.json]")
        sys.exit(2)
    message = sys.argv[1]
    config_path = sys.argv[2] if len(sys.argv) > 2 else "config.json"
    config = load_config(config_path)
    app = CLIApp(config)
    sys.exit(asyncio.run(app.run(message)))


if __name__ == "__main__":
    main()
