"""CLI commands for the trade journal.

This package provides the command-line interface for logging trades and
check-ins and for running behavior, pattern and risk analysis.
"""

from tradejournal.cli.main import cli, main

__all__ = ["cli", "main"]
