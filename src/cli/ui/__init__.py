"""CLI UI Components - Rich tables and panels for assessment output."""

from src.cli.ui.display import display_insights, display_results

__all__ = [
    "display_insights",
    "display_results",
]
