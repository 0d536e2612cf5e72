"""
Custom exceptions for Refinery.

Provides a small hierarchy of exceptions for precise error handling.
All exceptions inherit from RefineryError.

Exception Hierarchy:
    RefineryError (base)
    ├── ConfigurationError
    └── ExtractionError
        └── InvalidInputError

Heuristic ambiguity (no title, no confident candidate) is never raised:
the pipeline always returns some text for a well-formed document tree.
"""

from typing import Any


class RefineryError(Exception):
    """
    Base exception for all Refinery errors.

    All custom exceptions inherit from this class, allowing for
    catch-all handling when needed.

    Attributes:
        message: Human-readable error description
        details: Optional dictionary with additional context
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            details_str = ", ".join(
                f"{k}={v!r}" for k, v in self.details.items())
            return f"{self.message} ({details_str})"
        return self.message

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, details={self.details!r})"


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(RefineryError):
    """
    Error in configuration loading or validation.

    Raised when:
    - Configuration file is malformed
    - Setting values fail validation
    """

    pass


# =============================================================================
# Extraction Errors
# =============================================================================


class ExtractionError(RefineryError):
    """
    Base error for content extraction operations.
    """

    pass


class InvalidInputError(ExtractionError):
    """
    The supplied node forest cannot be extracted from.

    Raised when:
    - The input is neither a node list nor an element
    - No top-level html element is found
    - The html element has no children

    Signaled before any stage runs; there is no partial result.
    """

    def __init__(
        self,
        message: str,
        root_name: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if root_name:
            details["root_name"] = root_name
        super().__init__(message, details)
        self.root_name = root_name
