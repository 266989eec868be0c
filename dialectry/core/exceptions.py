"""
Custom exception hierarchy for dialectry.

This module defines the exceptions used throughout dialectry, providing
clear error categorization and consistent exit codes. A lookup miss is
not an exception: the registry returns the ``NOT_FOUND`` sentinel instead.
"""

import logging
import sys
from typing import Any, Optional

logger = logging.getLogger(__name__)


class DialectryError(Exception):
    """
    Base exception for all dialectry errors.

    Every dialectry-specific exception inherits from this class. It carries
    an error identifier and the exit value to use when the error terminates
    the program.
    """

    def __init__(
        self, message: str, ident: str = "dialectry", exitval: int = 2, **kwargs: Any
    ) -> None:
        """
        Initialize dialectry error.

        Args:
            message: Human-readable error message
            ident: Error identifier
            exitval: Exit value to use when this error causes program termination
            **kwargs: Additional error context
        """
        super().__init__(message)
        self.message = message
        self.ident = ident
        self.exitval = exitval
        self.context = kwargs
        self.previous_exception = kwargs.get("previous_exception")

    def __str__(self) -> str:
        return self.message


class ConfigurationError(DialectryError):
    """
    Configuration-related errors.

    Raised for unreadable or malformed configuration files, invalid values,
    incomplete dialect sections and misbehaving dialect plugins.
    """

    def __init__(
        self,
        message: str,
        config_file: Optional[str] = None,
        config_key: Optional[str] = None,
        **kwargs: Any,
    ) -> None:
        """
        Initialize configuration error.

        Args:
            message: Error description
            config_file: Path to problematic config file
            config_key: Specific configuration key that caused the error
            **kwargs: Additional context
        """
        super().__init__(message, ident="config", exitval=2, **kwargs)
        self.config_file = config_file
        self.config_key = config_key


class ValidationError(DialectryError):
    """
    Data validation errors.

    Raised when input fails validation checks, such as an empty connection
    URL or a URL pattern that cannot be compiled.
    """

    def __init__(
        self,
        message: str,
        field_name: Optional[str] = None,
        field_value: Optional[Any] = None,
        **kwargs: Any,
    ) -> None:
        """
        Initialize validation error.

        Args:
            message: Error description
            field_name: Name of the field that failed validation
            field_value: The invalid value
            **kwargs: Additional context
        """
        super().__init__(message, ident="validation", exitval=2, **kwargs)
        self.field_name = field_name
        self.field_value = field_value


class RegistryError(DialectryError):
    """Base class for dialect registry faults raised at load time."""

    def __init__(self, message: str, **kwargs: Any) -> None:
        super().__init__(message, ident="registry", exitval=2, **kwargs)


class DuplicatePatternError(RegistryError):
    """
    Raised when a descriptor's URL pattern is already registered.

    The registry is left exactly as it was before the failed registration.
    """

    def __init__(
        self,
        message: str,
        pattern: Optional[Any] = None,
        existing_name: Optional[str] = None,
        new_name: Optional[str] = None,
        **kwargs: Any,
    ) -> None:
        """
        Initialize duplicate pattern error.

        Args:
            message: Error description
            pattern: The URL pattern registered twice
            existing_name: Name of the dialect already holding the pattern
            new_name: Name of the dialect that was rejected
            **kwargs: Additional context
        """
        super().__init__(message, **kwargs)
        self.pattern = pattern
        self.existing_name = existing_name
        self.new_name = new_name


class RegistryStateError(RegistryError):
    """Raised when the registry is mutated after it has become ready."""


def format_validation_error(field: str, value: Any, expected: str) -> str:
    """
    Format validation error messages consistently.

    Args:
        field: Field name that failed validation
        value: Invalid value
        expected: Description of expected format

    Returns:
        Formatted validation error message
    """
    return f'Invalid {field} "{value}": {expected}'


def handle_exception(exc: Exception) -> int:
    """
    Report an exception on stderr and return the matching exit code.

    The underlying cause of a dialectry error, if any, is logged at debug
    level with its traceback.

    Args:
        exc: Exception to handle

    Returns:
        Exit code for the application
    """
    if isinstance(exc, DialectryError):
        print(f"dialectry: {exc.message}", file=sys.stderr)
        if exc.previous_exception is not None:
            logger.debug(
                "Caused by: %s",
                exc.previous_exception,
                exc_info=exc.previous_exception,
            )
        return exc.exitval

    print(f"dialectry: unexpected error: {exc}", file=sys.stderr)
    return 2
