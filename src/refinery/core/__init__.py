"""
Core module for Refinery.

Contains the exceptions shared by every pipeline stage.
"""

from refinery.core.exceptions import (
    RefineryError,
    ConfigurationError,
    ExtractionError,
    InvalidInputError,
)

__all__ = [
    # Base
    "RefineryError",
    "ConfigurationError",
    # Extraction
    "ExtractionError",
    "InvalidInputError",
]
