"""Command-line interface for Sight Tuner."""

# Import CLI entry points for easier access
from .main import cli
from .main import main as cli_main

__all__ = ["cli", "cli_main"]
