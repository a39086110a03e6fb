"""Shared utilities and common code."""

from src.shared.config import Settings, get_settings
from src.shared.exceptions import AssessmentServiceError, ErrorKind
from src.shared.result import Outcome

__all__ = [
    # Config
    "Settings",
    "get_settings",
    # Errors
    "AssessmentServiceError",
    "ErrorKind",
    # Results
    "Outcome",
]
