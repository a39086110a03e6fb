"""CLI Module - Command-line interface for the assessment pipeline.

This module provides a rich CLI built with Typer and Rich.

Usage:
    assessment-insights --help              Show all commands
    assessment-insights config              View configuration
    assessment-insights check-ai            Probe the AI connection
    assessment-insights simulate --scale 4  Run a sample assessment
"""

from src.cli.main import app, main

__all__ = ["app", "main"]
