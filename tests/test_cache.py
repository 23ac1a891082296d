"""Tests for the TTL cache and schema capabilities."""

import asyncio

from conftest import FakeBackend, FakeClock, schema_with

from wedding_planner_api.app.core.cache import TTLCache, tasks_key
from wedding_planner_api.app.core.capabilities import SchemaCapabilities


class TestTTLCache:
    def test_entry_lives_until_ttl(self):
        clock = FakeClock(1000)
        cache = TTLCache(clock)
        cache.set(tasks_key("W1"), [{"id": "t1"}], 2000)

        clock.now = 2999
        assert cache.get("tasks_W1") == [{"id": "t1"}]

        clock.now = 3001
        assert cache.get("tasks_W1") is None
        assert len(cache) == 0

    def test_expiry_boundary_is_exclusive(self):
        clock = FakeClock(0)
        cache = TTLCache(clock)
        cache.set("k", "v", 100)
        clock.now = 100
        assert cache.get("k") is None

    def test_invalidate_is_idempotent(self, cache):
        cache.set("k", 1, 1000)
        cache.invalidate("k")
        cache.invalidate("k")
        cache.invalidate("never-set")
        assert "k" not in cache

    def test_invalidate_many_and_clear(self, cache):
        for key in ("a", "b", "c"):
            cache.set(key, key, 1000)
        cache.invalidate_many(["a", "b"])
        assert cache.get("c") == "c"
        assert cache.get("a") is None
        cache.clear()
        assert len(cache) == 0

    def test_set_overwrites_and_restarts_ttl(self, clock, cache):
        cache.set("k", 1, 100)
        clock.advance(90)
        cache.set("k", 2, 100)
        clock.advance(90)
        assert cache.get("k") == 2

    def test_purge_expired(self, clock, cache):
        cache.set("short", 1, 10)
        cache.set("long", 2, 1000)
        clock.advance(50)
        assert cache.purge_expired() == 1
        assert "long" in cache

    def test_unread_entries_are_swept_by_later_writes(self, clock):
        cache = TTLCache(clock, purge_every=100)
        for i in range(1000):
            cache.set(f"wedding_{i}", i, 10)
        clock.advance(10_000)
        assert len(cache) == 1000
        for i in range(100):
            cache.set(f"tasks_{i}", i, 10)
        assert len(cache) == 100

    def test_sweep_can_be_disabled(self, clock):
        cache = TTLCache(clock, purge_every=0)
        cache.set("a", 1, 10)
        clock.advance(50)
        cache.set("b", 2, 10)
        assert len(cache) == 2


class TestSchemaCapabilities:
    def test_unknown_tables_assume_column_present(self):
        capabilities = SchemaCapabilities()
        assert capabilities.supports_ordering("tasks")

    def test_load_reads_definitions(self):
        backend = FakeBackend()
        backend.schema = schema_with(
            tasks=["id", "title", "order"], documents=["id", "name"], task_groups=["id", "order"]
        )
        capabilities = asyncio.run(SchemaCapabilities.load(backend))
        assert capabilities.as_dict() == {"tasks": True, "documents": False, "task_groups": True}

    def test_load_reads_openapi3_components(self):
        backend = FakeBackend()
        backend.schema = {"components": {"schemas": {"documents": {"properties": {"id": {}, "order": {}}}}}}
        capabilities = asyncio.run(SchemaCapabilities.load(backend))
        assert capabilities.supports_ordering("documents")

    def test_load_without_schema_assumes_everything(self, caplog):
        capabilities = asyncio.run(SchemaCapabilities.load(FakeBackend()))
        assert all(capabilities.as_dict().values())
        assert "Schema introspection unavailable" in caplog.text

    def test_mark_missing_sticks(self):
        capabilities = SchemaCapabilities({"tasks": ["id", "order"]})
        capabilities.mark_missing("tasks", "order")
        assert not capabilities.supports_ordering("tasks")
        assert capabilities.has_column("tasks", "id")
