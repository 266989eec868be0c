"""
Core functionality for dialectry.

This package contains the dialect descriptor model, the registry,
configuration management and the exception hierarchy.
"""

from dialectry.core.exceptions import (
    ConfigurationError,
    DialectryError,
    DuplicatePatternError,
    RegistryError,
    RegistryStateError,
    ValidationError,
)

__all__ = [
    "DialectryError",
    "ConfigurationError",
    "ValidationError",
    "RegistryError",
    "DuplicatePatternError",
    "RegistryStateError",
]
