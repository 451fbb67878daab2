"""Tests for the process-wide allocator and its configuration."""

import pytest

from avalon_id import id_generator
from avalon_id.config import get_settings
from avalon_id.errors import ConfigurationError
from avalon_id.snowflake import parse_id


class TestSettings:
    def test_defaults(self):
        s = get_settings()
        assert s.snowflake_worker_id == 1
        assert s.snowflake_datacenter_id == 1

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("SNOWFLAKE_WORKER_ID", "12")
        monkeypatch.setenv("SNOWFLAKE_DATACENTER_ID", " 30 ")
        s = get_settings()
        assert s.snowflake_worker_id == 12
        assert s.snowflake_datacenter_id == 30

    def test_blank_value_uses_default(self, monkeypatch):
        monkeypatch.setenv("SNOWFLAKE_WORKER_ID", "")
        assert get_settings().snowflake_worker_id == 1

    def test_non_integer_rejected(self, monkeypatch):
        monkeypatch.setenv("SNOWFLAKE_DATACENTER_ID", "dc-1")
        with pytest.raises(ConfigurationError) as exc:
            get_settings()
        assert exc.value.field == "SNOWFLAKE_DATACENTER_ID"

    def test_cached(self):
        assert get_settings() is get_settings()


class TestProcessAllocator:
    def test_lazy_singleton(self):
        first = id_generator.get_snowflake()
        assert id_generator.get_snowflake() is first

    def test_uses_configured_coordinates(self, monkeypatch):
        monkeypatch.setenv("SNOWFLAKE_WORKER_ID", "4")
        monkeypatch.setenv("SNOWFLAKE_DATACENTER_ID", "8")
        sid = parse_id(id_generator.next_id())
        assert (sid.worker_id, sid.datacenter_id) == (4, 8)

    def test_out_of_range_config_fails_creation(self, monkeypatch):
        monkeypatch.setenv("SNOWFLAKE_WORKER_ID", "32")
        with pytest.raises(ConfigurationError):
            id_generator.get_snowflake()
        # nothing half-built is left behind
        monkeypatch.setenv("SNOWFLAKE_WORKER_ID", "2")
        get_settings.cache_clear()
        assert id_generator.get_snowflake().worker_id == 2

    def test_explicit_init_overrides_config(self):
        sf = id_generator.init_snowflake(worker_id=9, datacenter_id=10)
        assert (sf.worker_id, sf.datacenter_id) == (9, 10)
        assert id_generator.get_snowflake() is sf

    def test_init_again_returns_same_instance(self):
        sf = id_generator.init_snowflake(3, 3)
        assert id_generator.init_snowflake() is sf
        assert id_generator.init_snowflake(3, 3) is sf

    def test_second_owner_rejected(self):
        id_generator.init_snowflake(3, 3)
        with pytest.raises(RuntimeError):
            id_generator.init_snowflake(4, 3)

    def test_next_id_increasing_through_singleton(self):
        ids = [int(id_generator.next_id()) for _ in range(1000)]
        assert ids == sorted(set(ids))

    def test_reset(self):
        first = id_generator.get_snowflake()
        id_generator.reset_snowflake()
        assert id_generator.get_snowflake() is not first
