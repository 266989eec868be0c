"""Shared test fixtures and configuration for dialectry tests."""

import logging
from pathlib import Path
from typing import List
from unittest.mock import patch

import pytest

from dialectry.core.descriptor import DialectDescriptor, UrlPattern
from dialectry.core.registry import DialectRegistry, reset_default_registry
from dialectry.dialects.builtin import builtin_dialects


@pytest.fixture
def db2z_descriptor() -> DialectDescriptor:
    """The DB2 for z/OS dialect."""
    return DialectDescriptor(
        name="DB2 for z/OS",
        url_pattern=UrlPattern.scheme("jdbc:db2z:"),
        default_driver_class_name="com.ibm.db2.jcc.DB2Driver",
        short_name="db2z",
    )


@pytest.fixture
def distinct_descriptors() -> List[DialectDescriptor]:
    """Three dialects whose patterns never overlap, each with its own driver."""
    return [
        DialectDescriptor("DB2 for z/OS", "jdbc:db2z:", "test.Db2zDriver", "db2z"),
        DialectDescriptor("DB2/LUW", "jdbc:db2:", "test.Db2Driver", "db2"),
        DialectDescriptor("Oracle", "jdbc:oracle:", "test.OracleDriver", "oracle"),
    ]


@pytest.fixture
def builtin_registry() -> DialectRegistry:
    """A ready registry holding only the built-in dialects."""
    return DialectRegistry(builtin_dialects())


@pytest.fixture
def sample_config_content() -> str:
    """Configuration declaring one extra dialect with plugins disabled."""
    return """[core]
    discover_plugins = false

[dialect "cache"]
    name = InterSystems Cache
    match = scheme
    pattern = jdbc:Cache:
    driver = com.intersys.jdbc.CacheDriver
"""


@pytest.fixture
def config_file(tmp_path: Path, sample_config_content: str) -> Path:
    """Create a temporary config file."""
    path = tmp_path / "dialectry.conf"
    path.write_text(sample_config_content)
    return path


@pytest.fixture
def no_plugins():
    """Pretend no distribution publishes dialect entry points."""
    with patch("dialectry.dialects.discovery.entry_points", return_value=[]) as ep:
        yield ep


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch, tmp_path):
    """Isolate tests from the caller's configuration, registry and logging."""
    monkeypatch.delenv("DIALECTRY_CONFIG", raising=False)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    reset_default_registry()
    yield
    reset_default_registry()

    # configure_logging() detaches the package logger from the root logger
    package_logger = logging.getLogger("dialectry")
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        handler.close()
    package_logger.propagate = True
    package_logger.setLevel(logging.NOTSET)
