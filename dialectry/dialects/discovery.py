"""
Dialect discovery for the default registry.

Dialects beyond the built-in table come from two explicit sources read
once at start-up: entry points published by installed distributions, and
``[dialect "<name>"]`` sections in configuration files.
"""

import logging
from importlib.metadata import entry_points
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from ..core.descriptor import DialectDescriptor, UrlPattern
from ..core.exceptions import ConfigurationError, ValidationError
from .builtin import builtin_dialects

if TYPE_CHECKING:
    from ..core.config import Config

logger = logging.getLogger(__name__)

ENTRY_POINT_GROUP = "dialectry.dialects"


def load_plugin_dialects(group: str = ENTRY_POINT_GROUP) -> List[DialectDescriptor]:
    """
    Load dialects published under an entry-point group.

    Each entry point must resolve to a DialectDescriptor or an iterable of
    them. Entry points that fail to import are skipped with a warning.

    Args:
        group: Entry-point group name

    Returns:
        Discovered descriptors, sorted by entry point name

    Raises:
        ConfigurationError: If an entry point yields anything else
    """
    dialects: List[DialectDescriptor] = []

    for ep in sorted(entry_points(group=group), key=lambda ep: ep.name):
        try:
            loaded = ep.load()
        except Exception as e:
            logger.warning("Cannot load dialect plugin %s: %s", ep.name, e)
            continue

        if isinstance(loaded, DialectDescriptor):
            found = [loaded]
        elif isinstance(loaded, (list, tuple)) and all(
            isinstance(d, DialectDescriptor) for d in loaded
        ):
            found = list(loaded)
        else:
            raise ConfigurationError(
                f'Dialect plugin "{ep.name}" must provide a DialectDescriptor '
                f"or a list of them, got {type(loaded).__name__}"
            )

        logger.debug(
            "Dialect plugin %s provides %s",
            ep.name,
            ", ".join(d.short_name for d in found),
        )
        dialects.extend(found)

    return dialects


def _descriptor_from_section(short_name: str, section: Dict[str, Any]) -> DialectDescriptor:
    missing = [key for key in ("driver", "pattern") if not section.get(key)]
    if missing:
        raise ConfigurationError(
            f'Dialect "{short_name}" is missing required key(s): {", ".join(missing)}',
            config_key=f"dialect.{short_name}.{missing[0]}",
        )

    try:
        pattern = UrlPattern(section.get("match") or "scheme", section["pattern"])
        return DialectDescriptor(
            name=section.get("name") or short_name,
            url_pattern=pattern,
            default_driver_class_name=section["driver"],
            short_name=short_name,
        )
    except ValidationError as e:
        raise ConfigurationError(
            f'Invalid dialect "{short_name}": {e}',
            config_key=f"dialect.{short_name}",
            previous_exception=e,
        )


def load_config_dialects(config: "Config") -> List[DialectDescriptor]:
    """
    Build dialects declared in configuration.

    Example::

        [dialect "cache"]
            name = InterSystems Cache
            match = scheme
            pattern = jdbc:Cache:
            driver = com.intersys.jdbc.CacheDriver

    Args:
        config: Configuration object

    Returns:
        Descriptors in the order the sections were read

    Raises:
        ConfigurationError: If a section is incomplete or invalid
    """
    sections = config.get_section("dialect")
    return [
        _descriptor_from_section(short_name, values)
        for short_name, values in sections.items()
        if isinstance(values, dict)
    ]


def collect_dialects(config: Optional["Config"] = None) -> List[DialectDescriptor]:
    """
    Gather every dialect for the default registry in registration order.

    Args:
        config: Optional configuration supplying extra dialects and the
            ``core.discover_plugins`` switch

    Returns:
        Built-in, plugin and configured descriptors
    """
    dialects = builtin_dialects()

    discover = True
    if config is not None:
        discover = config.get("core.discover_plugins", True, expected_type=bool)

    if discover:
        dialects.extend(load_plugin_dialects())

    if config is not None:
        dialects.extend(load_config_dialects(config))

    return dialects
