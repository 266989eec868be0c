"""
Type system and validators for dialectry.

This module defines the type aliases, enums, sentinels and small validation
helpers shared by the registry, configuration and command line layers.
"""

import re
from enum import Enum
from typing import Any, NewType, Tuple

DriverClassName = NewType("DriverClassName", str)

# Verbosity levels
VerbosityLevel = int

SCHEME_SEPARATOR = ":"


class PatternKind(Enum):
    """How a URL pattern is tested against a connection URL."""

    SCHEME = "scheme"
    PREFIX = "prefix"
    REGEX = "regex"


class RegistryState(Enum):
    """Lifecycle states of a dialect registry."""

    UNINITIALIZED = "uninitialized"
    READY = "ready"


class NotFound:
    """
    Result of a lookup that no registered dialect claims.

    There is exactly one instance, ``NOT_FOUND``. It is falsy so callers
    can write ``if not result``, but it is never equal to ``None`` or to
    the empty string.
    """

    _instance = None

    def __new__(cls) -> "NotFound":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "NOT_FOUND"


NOT_FOUND = NotFound()


def split_scheme(value: str) -> Tuple[str, ...]:
    """
    Split a scheme pattern such as ``jdbc:db2z:`` into its tokens.

    A single trailing separator is dropped; empty inner tokens are kept so
    that malformed patterns stay malformed rather than silently widening.

    Args:
        value: Colon-delimited scheme pattern

    Returns:
        Tuple of scheme tokens, e.g. ``("jdbc", "db2z")``
    """
    if value.endswith(SCHEME_SEPARATOR):
        value = value[: -len(SCHEME_SEPARATOR)]
    return tuple(value.split(SCHEME_SEPARATOR))


def validate_url(url: object) -> bool:
    """
    Validate that a connection URL satisfies the input contract.

    Only non-emptiness is required; malformed URLs are allowed through and
    simply fail to match every pattern.

    Args:
        url: Candidate connection URL

    Returns:
        True if valid, False otherwise
    """
    return isinstance(url, str) and url != ""


def validate_short_name(name: str) -> bool:
    """
    Validate a dialect short name (used in config sections and the CLI).

    Args:
        name: Short name to validate

    Returns:
        True if valid, False otherwise
    """
    pattern = re.compile(r"^[a-z][a-z0-9_-]*$")
    return bool(pattern.match(name)) and len(name) <= 64


def validate_config_key(key: str) -> bool:
    """
    Validate configuration key format.

    Args:
        key: Configuration key to validate

    Returns:
        True if valid, False otherwise
    """
    # Subsection names such as dialect.derby-client may contain dashes
    pattern = re.compile(r"^[a-zA-Z][a-zA-Z0-9._-]*$")
    return bool(pattern.match(key)) and len(key) <= 255


def coerce_config_value(value: str, expected_type: type) -> Any:
    """
    Coerce string configuration value to expected type.

    Args:
        value: String value from configuration
        expected_type: Expected Python type

    Returns:
        Coerced value

    Raises:
        ValueError: If coercion fails
    """
    if expected_type == bool:
        lowered = value.lower()
        if lowered in ("true", "1", "yes", "on"):
            return True
        if lowered in ("false", "0", "no", "off", ""):
            return False
        raise ValueError(f"not a boolean: {value!r}")
    elif expected_type == int:
        return int(value)
    elif expected_type == float:
        return float(value)
    elif expected_type == list:
        return [item.strip() for item in value.split(",") if item.strip()]
    else:
        return value


def sanitize_connection_string(connection_string: str) -> str:
    """
    Sanitize connection string for logging (remove passwords).

    Args:
        connection_string: Database connection string

    Returns:
        Sanitized connection string
    """
    patterns = [
        r"(?i)password=[^;&]+",
        r"(?i)pwd=[^;&]+",
        r"://[^:/@]+:[^@]+@",  # user:password@host format
    ]

    sanitized = connection_string
    for pattern in patterns:
        sanitized = re.sub(
            pattern,
            lambda m: (
                m.group(0).split("=")[0] + "=***"
                if "=" in m.group(0)
                else "://***:***@"
            ),
            sanitized,
        )

    return sanitized
