"""
Unit tests for the dialect registry.

Tests registration, bulk loading, the load-once lifecycle, resolution
order and the default process-wide registry.
"""

import itertools
import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from dialectry.core.config import Config
from dialectry.core.descriptor import DialectDescriptor, UrlPattern
from dialectry.core.exceptions import (
    DuplicatePatternError,
    RegistryStateError,
    ValidationError,
)
from dialectry.core.registry import (
    DialectRegistry,
    get_default_registry,
    reset_default_registry,
    resolve_driver,
)
from dialectry.core.types import NOT_FOUND, RegistryState


class TestRegistryLifecycle:
    """Test the Uninitialized -> Ready transition."""

    def test_new_registry_is_uninitialized(self):
        registry = DialectRegistry()
        assert registry.state is RegistryState.UNINITIALIZED
        assert not registry.is_ready
        assert len(registry) == 0

    def test_load_makes_registry_ready(self, distinct_descriptors):
        registry = DialectRegistry()
        registry.load(distinct_descriptors)

        assert registry.state is RegistryState.READY
        assert registry.descriptors == tuple(distinct_descriptors)

    def test_constructor_loads_descriptors(self, distinct_descriptors):
        registry = DialectRegistry(distinct_descriptors)
        assert registry.is_ready
        assert len(registry) == 3

    def test_register_during_load_phase(self, distinct_descriptors):
        registry = DialectRegistry()
        registry.register(distinct_descriptors[0])

        assert registry.state is RegistryState.UNINITIALIZED
        registry.load(distinct_descriptors[1:])
        assert registry.names() == ["db2z", "db2", "oracle"]

    def test_register_after_ready_rejected(self, distinct_descriptors, db2z_descriptor):
        registry = DialectRegistry(distinct_descriptors[1:])

        with pytest.raises(RegistryStateError):
            registry.register(db2z_descriptor)
        assert len(registry) == 2

    def test_second_load_rejected(self, distinct_descriptors):
        registry = DialectRegistry(distinct_descriptors)
        with pytest.raises(RegistryStateError):
            registry.load([])

    def test_empty_load_is_ready(self):
        registry = DialectRegistry([])
        assert registry.is_ready
        assert registry.resolve_driver("jdbc:h2:mem:test") is NOT_FOUND


class TestDuplicatePatterns:
    """Test rejection of identical URL patterns."""

    def test_register_duplicate_pattern(self, db2z_descriptor):
        registry = DialectRegistry()
        registry.register(db2z_descriptor)
        clone = DialectDescriptor(
            "Another z/OS", UrlPattern.scheme("jdbc:db2z:"), "other.Driver", "db2z-other"
        )

        with pytest.raises(DuplicatePatternError) as exc_info:
            registry.register(clone)

        error = exc_info.value
        assert error.pattern == UrlPattern.scheme("jdbc:db2z:")
        assert error.existing_name == "DB2 for z/OS"
        assert error.new_name == "Another z/OS"
        assert error.ident == "registry"

    def test_duplicate_leaves_prior_state(self, distinct_descriptors):
        registry = DialectRegistry()
        registry.register(distinct_descriptors[0])
        before = registry.descriptors

        with pytest.raises(DuplicatePatternError):
            registry.register(
                DialectDescriptor("Copy", "jdbc:db2z:", "copy.Driver", "copy")
            )

        assert registry.descriptors == before
        assert registry.state is RegistryState.UNINITIALIZED
        assert registry.resolve_driver("jdbc:db2z://host/db") == "test.Db2zDriver"

    def test_load_batch_is_atomic(self, distinct_descriptors):
        registry = DialectRegistry()
        batch = distinct_descriptors + [
            DialectDescriptor("Copy", "jdbc:oracle:", "copy.Driver", "copy")
        ]

        with pytest.raises(DuplicatePatternError):
            registry.load(batch)

        assert len(registry) == 0
        assert registry.state is RegistryState.UNINITIALIZED

        # A corrected batch can still be loaded
        registry.load(distinct_descriptors)
        assert registry.is_ready

    def test_scheme_spelled_without_trailing_separator_is_duplicate(self):
        batch = [
            DialectDescriptor("H2", UrlPattern.scheme("jdbc:h2:"), "org.h2.Driver"),
            DialectDescriptor("H2 again", UrlPattern.scheme("jdbc:h2"), "other.Driver"),
        ]

        with pytest.raises(DuplicatePatternError) as exc_info:
            DialectRegistry(batch)

        assert exc_info.value.existing_name == "H2"
        assert exc_info.value.new_name == "H2 again"

    def test_same_value_different_kind_is_not_duplicate(self):
        registry = DialectRegistry()
        registry.register(DialectDescriptor("A", UrlPattern.scheme("jdbc:a:"), "a.Driver"))
        registry.register(DialectDescriptor("B", UrlPattern.prefix("jdbc:a:"), "b.Driver"))
        assert len(registry) == 2


class TestResolveDriver:
    """Test URL to driver resolution."""

    def test_resolves_each_family(self, distinct_descriptors):
        registry = DialectRegistry(distinct_descriptors)

        assert registry.resolve_driver("jdbc:db2z://localhost:50000/liquibas") == "test.Db2zDriver"
        assert registry.resolve_driver("jdbc:db2://localhost:50000/liquibas") == "test.Db2Driver"
        assert (
            registry.resolve_driver("jdbc:oracle://localhost;databaseName=liquibase")
            == "test.OracleDriver"
        )

    def test_unrecognized_url_is_not_found(self, distinct_descriptors):
        registry = DialectRegistry(distinct_descriptors)
        result = registry.resolve_driver("jdbc:postgresql://localhost/db")

        assert result is NOT_FOUND
        assert result is not None
        assert result != ""

    def test_malformed_url_is_not_found(self, distinct_descriptors):
        registry = DialectRegistry(distinct_descriptors)
        for url in ["db2z", "jdbc", "::::", "jdbc:db2z"]:
            assert registry.resolve_driver(url) is NOT_FOUND

    def test_whitespace_url_is_not_found(self, distinct_descriptors):
        registry = DialectRegistry(distinct_descriptors)
        assert registry.resolve_driver("   ") is NOT_FOUND
        assert registry.resolve_driver(" jdbc:db2z://host/db") is NOT_FOUND

    def test_empty_url_rejected(self, distinct_descriptors):
        registry = DialectRegistry(distinct_descriptors)
        for url in ["", None, 42]:
            with pytest.raises(ValidationError):
                registry.resolve_driver(url)

    def test_zos_descriptor_alone_rejects_oracle(self, db2z_descriptor):
        registry = DialectRegistry([db2z_descriptor])

        assert (
            registry.resolve_driver("jdbc:db2z://localhost:50000/liquibas")
            == "com.ibm.db2.jcc.DB2Driver"
        )
        assert (
            registry.resolve_driver("jdbc:oracle://localhost;databaseName=liquibase")
            is NOT_FOUND
        )

    def test_resolution_is_idempotent(self, distinct_descriptors):
        registry = DialectRegistry(distinct_descriptors)
        urls = ["jdbc:db2z://h/d", "jdbc:db2://h/d", "jdbc:mysql://h/d"]
        first = [registry.resolve_driver(u) for u in urls]

        for _ in range(5):
            assert [registry.resolve_driver(u) for u in urls] == first

    def test_order_independent_without_overlap(self, distinct_descriptors):
        urls = [
            "jdbc:db2z://h/d",
            "jdbc:db2://h/d",
            "jdbc:oracle:thin:@h:1521:xe",
            "jdbc:sqlite:/tmp/x.db",
        ]
        expected = [DialectRegistry(distinct_descriptors).resolve_driver(u) for u in urls]

        for order in itertools.permutations(distinct_descriptors):
            registry = DialectRegistry(order)
            assert [registry.resolve_driver(u) for u in urls] == expected

    def test_first_registered_wins_on_overlap(self):
        broad = DialectDescriptor("Broad", UrlPattern.prefix("jdbc:db2"), "broad.Driver")
        narrow = DialectDescriptor("Narrow", UrlPattern.scheme("jdbc:db2z:"), "narrow.Driver")

        assert DialectRegistry([broad, narrow]).resolve_driver("jdbc:db2z://h") == "broad.Driver"
        assert DialectRegistry([narrow, broad]).resolve_driver("jdbc:db2z://h") == "narrow.Driver"

    def test_overlap_is_logged(self, caplog):
        broad = DialectDescriptor("Broad", UrlPattern.prefix("jdbc:db2"), "broad.Driver")
        narrow = DialectDescriptor("Narrow", UrlPattern.scheme("jdbc:db2z:"), "narrow.Driver")

        with caplog.at_level("DEBUG", logger="dialectry.core.registry"):
            DialectRegistry([broad, narrow])

        assert any("may overlap" in r.getMessage() for r in caplog.records)

    def test_resolve_dialect_returns_descriptor(self, distinct_descriptors):
        registry = DialectRegistry(distinct_descriptors)

        assert registry.resolve_dialect("jdbc:db2z://h/d") is distinct_descriptors[0]
        assert registry.resolve_dialect("jdbc:h2:mem:x") is NOT_FOUND

    def test_concurrent_lookups(self, distinct_descriptors):
        registry = DialectRegistry(distinct_descriptors)
        urls = ["jdbc:db2z://h/d", "jdbc:db2://h/d", "jdbc:oracle://h", "jdbc:x:y"] * 250

        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(registry.resolve_driver, urls))

        assert results[:4] == ["test.Db2zDriver", "test.Db2Driver", "test.OracleDriver", NOT_FOUND]
        assert results == results[:4] * 250


class TestRegistryInspection:
    """Test lookup helpers."""

    def test_get_by_short_name(self, distinct_descriptors):
        registry = DialectRegistry(distinct_descriptors)
        assert registry.get("oracle") is distinct_descriptors[2]
        assert registry.get("h2") is NOT_FOUND

    def test_contains(self, distinct_descriptors):
        registry = DialectRegistry(distinct_descriptors)
        assert "db2z" in registry
        assert distinct_descriptors[1] in registry
        assert "h2" not in registry

    def test_iteration_order(self, distinct_descriptors):
        registry = DialectRegistry(distinct_descriptors)
        assert list(registry) == distinct_descriptors

    def test_repr(self, distinct_descriptors):
        assert repr(DialectRegistry(distinct_descriptors)) == (
            "DialectRegistry(state=ready, dialects=3)"
        )


class TestDefaultRegistry:
    """Test the process-wide registry."""

    def test_built_once(self, no_plugins):
        first = get_default_registry()
        second = get_default_registry()

        assert first is second
        assert first.is_ready
        no_plugins.assert_called_once()

    def test_concurrent_first_use(self, no_plugins):
        barrier = threading.Barrier(8)

        def build():
            barrier.wait()
            return get_default_registry()

        with ThreadPoolExecutor(max_workers=8) as pool:
            registries = list(pool.map(lambda _: build(), range(8)))

        assert all(r is registries[0] for r in registries)
        no_plugins.assert_called_once()

    def test_module_level_resolve_driver(self, no_plugins):
        assert resolve_driver("jdbc:db2z://localhost:50000/liquibas") == "com.ibm.db2.jcc.DB2Driver"
        assert resolve_driver("jdbc:unknown://localhost") is NOT_FOUND

    def test_config_dialects_included(self, config_file, no_plugins):
        registry = get_default_registry(Config([config_file]))

        assert registry.resolve_driver("jdbc:Cache://localhost:1972/USER") == (
            "com.intersys.jdbc.CacheDriver"
        )
        # discover_plugins = false in the file
        no_plugins.assert_not_called()

    def test_local_config_file_read_by_default(self, tmp_path, monkeypatch, no_plugins):
        (tmp_path / "dialectry.conf").write_text(
            '[dialect "cache"]\npattern = jdbc:Cache:\ndriver = com.intersys.jdbc.CacheDriver\n'
        )
        monkeypatch.chdir(tmp_path)

        assert resolve_driver("jdbc:Cache://h/USER") == "com.intersys.jdbc.CacheDriver"
        no_plugins.assert_called_once()

    def test_env_config_disables_plugins(self, config_file, monkeypatch, no_plugins):
        monkeypatch.setenv("DIALECTRY_CONFIG", str(config_file))

        registry = get_default_registry()

        assert "cache" in registry
        no_plugins.assert_not_called()

    def test_reset(self, no_plugins):
        first = get_default_registry()
        reset_default_registry()
        assert get_default_registry() is not first
