"""
Entry point for running the CLI as a module.

Usage:
    python -m footballer_api <command>
"""

from footballer_api.cli import cli

if __name__ == "__main__":
    cli()
