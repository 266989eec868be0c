"""
Dialect tables for dialectry.

The built-in table ships with the package; further dialects are discovered
from entry points and configuration when the default registry is built.
"""

from .builtin import BUILTIN_DIALECTS, builtin_dialects
from .discovery import (
    ENTRY_POINT_GROUP,
    collect_dialects,
    load_config_dialects,
    load_plugin_dialects,
)

__all__ = [
    'BUILTIN_DIALECTS',
    'ENTRY_POINT_GROUP',
    'builtin_dialects',
    'collect_dialects',
    'load_config_dialects',
    'load_plugin_dialects',
]
