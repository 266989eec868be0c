"""
Dialectry - database dialect resolution.

Maps JDBC-style connection URLs to the dialect and default driver class
that handle them, through a load-once registry of dialect descriptors.
"""

__version__ = "1.0.0"

from dialectry.core.descriptor import DialectDescriptor, UrlPattern
from dialectry.core.exceptions import DialectryError, DuplicatePatternError
from dialectry.core.registry import (
    DialectRegistry,
    get_default_registry,
    resolve_driver,
)
from dialectry.core.types import NOT_FOUND, NotFound, PatternKind

__all__ = [
    "DialectDescriptor",
    "DialectRegistry",
    "DialectryError",
    "DuplicatePatternError",
    "NOT_FOUND",
    "NotFound",
    "PatternKind",
    "UrlPattern",
    "get_default_registry",
    "resolve_driver",
]
