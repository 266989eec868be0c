"""
Dialect descriptors and URL patterns.

A DialectDescriptor binds a URL-matching rule to a dialect's default
driver class name. Dialects are plain values in a flat table; adding a
dialect means adding a descriptor, never subclassing.
"""

import re
from dataclasses import dataclass, field
from typing import Optional, Pattern, Tuple, Union

from .exceptions import ValidationError
from .types import (
    NOT_FOUND,
    SCHEME_SEPARATOR,
    DriverClassName,
    NotFound,
    PatternKind,
    split_scheme,
    validate_short_name,
    validate_url,
)

_REGEX_META = re.compile(r"[\\.^$*+?{}\[\]|()]")
_OPTIONAL_QUANTIFIERS = "?*{"


def _has_top_level_alternation(expression: str) -> bool:
    depth = 0
    in_class = escaped = False
    for char in expression:
        if escaped:
            escaped = False
        elif char == "\\":
            escaped = True
        elif in_class:
            in_class = char != "]"
        elif char == "[":
            in_class = True
        elif char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
        elif char == "|" and depth == 0:
            return True
    return False


@dataclass(frozen=True)
class UrlPattern:
    """
    A matching rule over connection URLs.

    SCHEME patterns compare whole colon-delimited tokens, so ``jdbc:db2:``
    never claims ``jdbc:db2z:...``; the trailing separator is optional when
    writing one. PREFIX patterns are a raw anchored ``startswith``. REGEX
    patterns are applied with ``re.match``.
    """

    kind: PatternKind
    value: str
    _tokens: Tuple[str, ...] = field(
        init=False, repr=False, compare=False, default=()
    )
    _regex: Optional[Pattern[str]] = field(
        init=False, repr=False, compare=False, default=None
    )

    def __post_init__(self) -> None:
        if isinstance(self.kind, str):
            try:
                object.__setattr__(self, "kind", PatternKind(self.kind.lower()))
            except ValueError:
                raise ValidationError(
                    f"Unknown pattern kind: {self.kind}",
                    field_name="kind",
                    field_value=self.kind,
                )

        if not isinstance(self.value, str) or not self.value:
            raise ValidationError(
                "URL pattern must be a non-empty string",
                field_name="value",
                field_value=self.value,
            )

        if self.kind is PatternKind.SCHEME:
            tokens = split_scheme(self.value)
            if not all(tokens):
                raise ValidationError(
                    f'Invalid scheme pattern "{self.value}": empty scheme segment',
                    field_name="value",
                    field_value=self.value,
                )
            object.__setattr__(self, "_tokens", tokens)
            # "jdbc:h2" and "jdbc:h2:" are one rule; store the canonical spelling
            object.__setattr__(
                self, "value", SCHEME_SEPARATOR.join(tokens) + SCHEME_SEPARATOR
            )
        elif self.kind is PatternKind.REGEX:
            try:
                object.__setattr__(self, "_regex", re.compile(self.value))
            except re.error as e:
                raise ValidationError(
                    f'Invalid regular expression "{self.value}": {e}',
                    field_name="value",
                    field_value=self.value,
                    previous_exception=e,
                )

    @classmethod
    def scheme(cls, value: str) -> "UrlPattern":
        return cls(PatternKind.SCHEME, value)

    @classmethod
    def prefix(cls, value: str) -> "UrlPattern":
        return cls(PatternKind.PREFIX, value)

    @classmethod
    def regex(cls, value: str) -> "UrlPattern":
        return cls(PatternKind.REGEX, value)

    def matches(self, url: str) -> bool:
        """
        Test whether a connection URL satisfies this pattern.

        Args:
            url: Connection URL

        Returns:
            True if the URL belongs to this pattern
        """
        if self.kind is PatternKind.SCHEME:
            count = len(self._tokens)
            parts = url.split(SCHEME_SEPARATOR, count)
            # The separator after the last scheme token must be present
            return len(parts) == count + 1 and tuple(parts[:count]) == self._tokens
        if self.kind is PatternKind.PREFIX:
            return url.startswith(self.value)
        return self._regex.match(url) is not None

    @property
    def literal_prefix(self) -> str:
        """The literal text every matching URL starts with."""
        if self.kind is PatternKind.SCHEME:
            return SCHEME_SEPARATOR.join(self._tokens) + SCHEME_SEPARATOR
        if self.kind is PatternKind.PREFIX:
            return self.value
        literal = self.value[1:] if self.value.startswith("^") else self.value
        if _has_top_level_alternation(literal):
            return ""
        meta = _REGEX_META.search(literal)
        if not meta:
            return literal
        end = meta.start()
        if literal[end] in _OPTIONAL_QUANTIFIERS:
            # The quantified character may be absent
            end -= 1
        return literal[: max(end, 0)]

    def may_overlap(self, other: "UrlPattern") -> bool:
        """
        Report whether some URL could satisfy both patterns.

        This is a conservative check on literal prefixes, used to flag
        order-dependent registrations.
        """
        mine, theirs = self.literal_prefix, other.literal_prefix
        return mine.startswith(theirs) or theirs.startswith(mine)

    def __str__(self) -> str:
        return f"{self.kind.value} {self.value}"


def _slugify(name: str) -> str:
    return re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-")


@dataclass(frozen=True)
class DialectDescriptor:
    """Binds a URL pattern to a dialect's default driver class name."""

    name: str
    url_pattern: UrlPattern
    default_driver_class_name: DriverClassName
    short_name: Optional[str] = None

    def __post_init__(self) -> None:
        """Normalise string patterns and derive the short name."""
        if not self.name:
            raise ValidationError("Dialect name is required", field_name="name")

        if not self.default_driver_class_name:
            raise ValidationError(
                f'Dialect "{self.name}" has no default driver class name',
                field_name="default_driver_class_name",
            )

        if isinstance(self.url_pattern, str):
            object.__setattr__(self, "url_pattern", UrlPattern.scheme(self.url_pattern))

        short_name = self.short_name or _slugify(self.name)
        if not validate_short_name(short_name):
            raise ValidationError(
                f'Invalid dialect short name "{short_name}"',
                field_name="short_name",
                field_value=short_name,
            )
        object.__setattr__(self, "short_name", short_name)

    def matches(self, url: str) -> bool:
        """Return True if this dialect claims the URL."""
        return validate_url(url) and self.url_pattern.matches(url)

    def get_default_driver(self, url: str) -> Union[DriverClassName, NotFound]:
        """
        Return this dialect's driver class name if it claims the URL.

        Args:
            url: Connection URL

        Returns:
            The default driver class name, or NOT_FOUND for foreign URLs
        """
        if self.matches(url):
            return self.default_driver_class_name
        return NOT_FOUND
