"""
Custom exception classes for expectkit.

Separates failures of the generation pass itself from failures raised
by the extractor methods it generates.
"""

from typing import Any, Optional


class ExpectkitException(Exception):
    """Base exception class for all expectkit exceptions."""

    pass


class GenerationError(ExpectkitException):
    """
    Raised when extractor generation cannot proceed for a type.

    Generation is all-or-nothing: when this is raised no method of the
    offending type has been produced or attached.

    Example:
        >>> raise GenerationError(
        ...     "Expect can only be derived for tagged unions",
        ...     type_name="Point",
        ... )
    """

    def __init__(self, reason: str, type_name: Optional[str] = None):
        self.reason = reason
        self.type_name = type_name
        message = f"{reason}"
        if type_name:
            message += f" (type={type_name})"
        super().__init__(message)


class SchemaValidationError(GenerationError):
    """Raised when a field type cannot take part in an equality check."""

    pass


class ExpectationError(ExpectkitException):
    """
    Raised by a generated extractor of a shape marked with ``panic`` when
    the held value is not that shape or holds different field values.
    """

    def __init__(self, expected: Any, actual: Any):
        self.expected = expected
        self.actual = actual
        super().__init__(f"Expected {expected!r} but got {actual!r}")
