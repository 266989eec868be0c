"""
Dialect registry for dialectry.

The registry owns an ordered collection of DialectDescriptors and maps a
connection URL to exactly one dialect, or to NOT_FOUND. It is populated
once during a load phase and is read-only afterwards, so lookups need no
locking.
"""

import logging
import threading
from typing import Dict, Iterable, Iterator, List, Optional, Tuple, Union

from .config import Config
from .descriptor import DialectDescriptor, UrlPattern
from .exceptions import (
    DuplicatePatternError,
    RegistryStateError,
    ValidationError,
    format_validation_error,
)
from .types import (
    NOT_FOUND,
    DriverClassName,
    NotFound,
    RegistryState,
    sanitize_connection_string,
    validate_url,
)
from ..utils.logging import LogLevel

logger = logging.getLogger(__name__)


class DialectRegistry:
    """
    Ordered, load-once collection of dialect descriptors.

    Descriptors are held in a tuple that is replaced rather than mutated,
    so a reader always sees a complete snapshot. Registration order is the
    tie-break when patterns overlap: the first registered descriptor wins.
    """

    def __init__(self, descriptors: Optional[Iterable[DialectDescriptor]] = None) -> None:
        """
        Initialize dialect registry.

        Args:
            descriptors: Optional descriptors to bulk-load immediately,
                leaving the registry ready
        """
        self._descriptors: Tuple[DialectDescriptor, ...] = ()
        self._state = RegistryState.UNINITIALIZED
        self._lock = threading.Lock()

        if descriptors is not None:
            self.load(descriptors)

    @property
    def state(self) -> RegistryState:
        return self._state

    @property
    def is_ready(self) -> bool:
        return self._state is RegistryState.READY

    @property
    def descriptors(self) -> Tuple[DialectDescriptor, ...]:
        """Registered descriptors in registration order."""
        return self._descriptors

    def register(self, descriptor: DialectDescriptor) -> None:
        """
        Add a descriptor during the load phase.

        Args:
            descriptor: Descriptor to add

        Raises:
            DuplicatePatternError: If an identical URL pattern is registered
            RegistryStateError: If the registry is already ready
        """
        with self._lock:
            self._ensure_loading("register")
            self._descriptors = self._extended(self._descriptors, [descriptor])

    def load(self, descriptors: Iterable[DialectDescriptor]) -> None:
        """
        Bulk-load descriptors and make the registry ready.

        The whole batch is validated before anything is added; on failure
        the registry keeps its previous contents and stays uninitialized.

        Args:
            descriptors: Descriptors to add, in registration order

        Raises:
            DuplicatePatternError: If any pattern is registered twice
            RegistryStateError: If the registry is already ready
        """
        batch = list(descriptors)
        with self._lock:
            self._ensure_loading("load")
            self._descriptors = self._extended(self._descriptors, batch)
            self._state = RegistryState.READY

        logger.debug(
            "Dialect registry ready with %d dialect(s)", len(self._descriptors)
        )

    def _ensure_loading(self, operation: str) -> None:
        if self._state is RegistryState.READY:
            raise RegistryStateError(
                f"Cannot {operation} dialects: registry is already loaded"
            )

    def _extended(
        self,
        current: Tuple[DialectDescriptor, ...],
        additions: List[DialectDescriptor],
    ) -> Tuple[DialectDescriptor, ...]:
        """Return current + additions, or raise without touching state."""
        owners: Dict[UrlPattern, DialectDescriptor] = {
            d.url_pattern: d for d in current
        }
        accepted = list(current)

        for descriptor in additions:
            existing = owners.get(descriptor.url_pattern)
            if existing is not None:
                raise DuplicatePatternError(
                    f'Dialect "{descriptor.name}" uses URL pattern '
                    f'"{descriptor.url_pattern}" already registered by '
                    f'"{existing.name}"',
                    pattern=descriptor.url_pattern,
                    existing_name=existing.name,
                    new_name=descriptor.name,
                )

            for earlier in accepted:
                if earlier.url_pattern.may_overlap(descriptor.url_pattern):
                    logger.debug(
                        'Dialect "%s" (%s) may overlap "%s" (%s); "%s" wins ties',
                        descriptor.name,
                        descriptor.url_pattern,
                        earlier.name,
                        earlier.url_pattern,
                        earlier.name,
                    )

            owners[descriptor.url_pattern] = descriptor
            accepted.append(descriptor)

        return tuple(accepted)

    def resolve_dialect(self, url: str) -> Union[DialectDescriptor, NotFound]:
        """
        Find the dialect that claims a connection URL.

        Args:
            url: Non-empty connection URL

        Returns:
            The first matching descriptor in registration order, or NOT_FOUND

        Raises:
            ValidationError: If url is not a non-empty string
        """
        if not validate_url(url):
            raise ValidationError(
                format_validation_error(
                    "connection URL", url, "expected a non-empty string"
                ),
                field_name="url",
                field_value=url,
            )

        for descriptor in self._descriptors:
            if descriptor.url_pattern.matches(url):
                if logger.isEnabledFor(LogLevel.TRACE):
                    logger.log(
                        LogLevel.TRACE,
                        "%s resolved to %s",
                        sanitize_connection_string(url),
                        descriptor.name,
                    )
                return descriptor

        logger.debug(
            "No dialect recognizes %s", sanitize_connection_string(url)
        )
        return NOT_FOUND

    def resolve_driver(self, url: str) -> Union[DriverClassName, NotFound]:
        """
        Map a connection URL to its dialect's default driver class name.

        Args:
            url: Non-empty connection URL

        Returns:
            Driver class name, or NOT_FOUND if no dialect claims the URL

        Raises:
            ValidationError: If url is not a non-empty string
        """
        descriptor = self.resolve_dialect(url)
        if descriptor is NOT_FOUND:
            return NOT_FOUND
        return descriptor.default_driver_class_name

    def get(self, short_name: str) -> Union[DialectDescriptor, NotFound]:
        """Look up a descriptor by short name."""
        for descriptor in self._descriptors:
            if descriptor.short_name == short_name:
                return descriptor
        return NOT_FOUND

    def names(self) -> List[str]:
        return [d.short_name for d in self._descriptors]

    def __len__(self) -> int:
        return len(self._descriptors)

    def __iter__(self) -> Iterator[DialectDescriptor]:
        return iter(self._descriptors)

    def __contains__(self, item: object) -> bool:
        if isinstance(item, str):
            return self.get(item) is not NOT_FOUND
        return item in self._descriptors

    def __repr__(self) -> str:
        return f"DialectRegistry(state={self._state.value}, dialects={len(self)})"


_default_registry: Optional[DialectRegistry] = None
_default_lock = threading.Lock()


def get_default_registry(config: Optional[Config] = None) -> DialectRegistry:
    """
    Get the process-wide registry, building it on first use.

    Built-in dialects are registered first, then dialects published by
    installed plugins, then dialects declared in configuration.

    Args:
        config: Config used only on first call; defaults to the files found
            in the standard locations and $DIALECTRY_CONFIG

    Returns:
        The ready default registry
    """
    global _default_registry
    if _default_registry is None:
        with _default_lock:
            if _default_registry is None:
                from ..dialects.discovery import collect_dialects

                if config is None:
                    config = Config()
                _default_registry = DialectRegistry(collect_dialects(config))
    return _default_registry


def reset_default_registry() -> None:
    """Forget the default registry (tests only)."""
    global _default_registry
    with _default_lock:
        _default_registry = None


def resolve_driver(url: str) -> Union[DriverClassName, NotFound]:
    """Resolve a driver class name using the default registry."""
    return get_default_registry().resolve_driver(url)
