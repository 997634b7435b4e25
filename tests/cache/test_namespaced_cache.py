from __future__ import annotations

import asyncio
import time

import pytest

from nscache import (
    CacheSettings,
    InMemoryBackingStore,
    NamespacedExpiringCache,
    open_cache,
)
from nscache.types import JsonValue


def run_async(coro):
    return asyncio.run(coro)


class _Clock:
    def __init__(self, now: float = 1_700_000_000.4) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class _RecordingStore(InMemoryBackingStore):
    def __init__(self) -> None:
        super().__init__()
        self.updates: list[tuple[str, JsonValue | None]] = []

    async def update(self, key: str, value: JsonValue | None) -> bool:
        self.updates.append((key, value))
        return await super().update(key, value)


class _RejectingStore(InMemoryBackingStore):
    async def update(self, key: str, value: JsonValue | None) -> bool:
        _ = key
        _ = value
        return False


class _BrokenStore(InMemoryBackingStore):
    async def update(self, key: str, value: JsonValue | None) -> bool:
        raise ConnectionError("store offline")


def test_construction_requires_store_and_defaults_namespace():
    with pytest.raises(ValueError, match="backing store"):
        NamespacedExpiringCache(None)  # type: ignore[arg-type]

    store = _RecordingStore()
    cache = NamespacedExpiringCache(store)
    assert cache.namespace == "cache"
    assert cache.store is store
    assert store.updates == []


def test_put_then_get_and_has():
    async def scenario() -> None:
        cache = NamespacedExpiringCache(InMemoryBackingStore())
        for key, value in [
            ("str", "bar"),
            ("int", 42),
            ("list", [1, "two", None]),
            ("dict", {"nested": {"ok": True}}),
            ("falsy", 0),
        ]:
            assert await cache.put(key, value) is True
            assert cache.get(key) == value
            assert cache.has(key) is True
            assert key in cache

    run_async(scenario())


@pytest.mark.parametrize("bad_key", [1, 1.5, True, {"k": 1}, ["k"], None])
def test_put_rejects_non_string_keys(bad_key):
    store = _RecordingStore()
    cache = NamespacedExpiringCache(store)

    assert run_async(cache.put(bad_key, "value")) is False  # type: ignore[arg-type]
    assert cache.keys() == []
    assert store.updates == []


def test_put_rejects_missing_value():
    store = _RecordingStore()
    cache = NamespacedExpiringCache(store)

    assert run_async(cache.put("foo", None)) is False
    assert cache.has("foo") is False
    assert store.updates == []


def test_put_overwrites_and_persists_whole_namespace():
    async def scenario() -> None:
        clock = _Clock()
        store = _RecordingStore()
        cache = NamespacedExpiringCache(store, "ns", clock=clock)
        await cache.put("a", 1)
        await cache.put("b", 2, 10)
        await cache.put("a", 3)

        assert cache.get("a") == 3
        assert store.get("ns") == {
            "a": {"value": 3},
            "b": {"value": 2, "expiration": 1_700_000_010},
        }
        assert [key for key, _ in store.updates] == ["ns", "ns", "ns"]

    run_async(scenario())


def test_get_returns_default_or_none_when_missing():
    cache = NamespacedExpiringCache(InMemoryBackingStore())
    assert cache.get("nope") is None
    assert cache.get("nope", "fallback") == "fallback"


def test_expiration_is_floor_now_plus_ttl():
    async def scenario() -> None:
        clock = _Clock(1_700_000_000.9)
        cache = NamespacedExpiringCache(InMemoryBackingStore(), clock=clock)
        await cache.put("foo", "bar", 5)
        assert cache.get_expiration("foo") == 1_700_000_005

    run_async(scenario())


def test_entry_expires_exactly_at_boundary_second():
    async def scenario() -> None:
        clock = _Clock(100.0)
        cache = NamespacedExpiringCache(InMemoryBackingStore(), clock=clock)
        await cache.put("foo", "bar", 1)

        clock.advance(0.5)
        assert cache.has("foo") is True
        assert cache.is_expired("foo") is False

        clock.advance(0.5)
        assert cache.has("foo") is False
        assert cache.is_expired("foo") is True
        assert cache.get("foo") is None
        assert cache.get("foo", "default") == "default"
        assert cache.get_expiration("foo") is None

    run_async(scenario())


def test_zero_ttl_expires_immediately():
    clock = _Clock(50.0)
    cache = NamespacedExpiringCache(InMemoryBackingStore(), clock=clock)
    assert run_async(cache.put("foo", "bar", 0)) is True
    assert cache.has("foo") is False
    assert cache.keys() == ["foo"]


@pytest.mark.parametrize("ttl", [None, 1.5, "10", -1, True])
def test_non_integer_or_negative_ttl_never_expires(ttl):
    clock = _Clock()
    cache = NamespacedExpiringCache(InMemoryBackingStore(), clock=clock)
    assert run_async(cache.put("foo", "bar", ttl)) is True

    clock.advance(10_000)
    assert cache.get("foo") == "bar"
    assert cache.get_expiration("foo") is None
    assert cache.is_expired("foo") is False


def test_ttl_expires_with_real_clock():
    cache = NamespacedExpiringCache(InMemoryBackingStore())
    assert run_async(cache.put("foo", "bar", 1)) is True
    assert cache.has("foo") is True

    time.sleep(2)
    assert cache.get("foo") is None
    assert cache.has("foo") is False


def test_namespaces_are_isolated_on_a_shared_store():
    async def scenario() -> None:
        store = InMemoryBackingStore()
        cache1 = NamespacedExpiringCache(store, "cache1")
        cache2 = NamespacedExpiringCache(store, "cache2")
        await cache1.put("foo", "bar")
        await cache2.put("foo", "baz")

        assert cache1.get("foo") == "bar"
        assert cache2.get("foo") == "baz"
        assert cache1.get("foo") != cache2.get("foo")
        assert sorted(store.keys()) == ["cache1", "cache2"]

    run_async(scenario())


def test_new_instance_hydrates_from_store():
    async def scenario() -> None:
        store = InMemoryBackingStore()
        first = NamespacedExpiringCache(store, "shared")
        await first.put("foo", {"a": 1}, 60)

        second = NamespacedExpiringCache(store, "shared")
        assert second.get("foo") == {"a": 1}
        assert second.get_expiration("foo") == first.get_expiration("foo")

    run_async(scenario())


def test_hydration_skips_malformed_rows():
    async def scenario() -> None:
        store = InMemoryBackingStore()
        await store.update(
            "cache",
            {
                "good": {"value": "ok", "expiration": 9_999_999_999},
                "no_value": {"expiration": 1},
                "scalar": "oops",
            },
        )
        cache = NamespacedExpiringCache(store)
        assert cache.keys() == ["good"]
        assert cache.get_expiration("good") == 9_999_999_999

    run_async(scenario())


def test_keys_and_all_include_expired_entries():
    async def scenario() -> None:
        clock = _Clock(10.0)
        cache = NamespacedExpiringCache(InMemoryBackingStore(), clock=clock)
        await cache.put("short", "gone", 1)
        await cache.put("forever", "here")
        clock.advance(5)

        assert cache.keys() == ["short", "forever"]
        assert cache.all() == {"short": "gone", "forever": "here"}
        assert cache.has("short") is False
        assert len(cache) == 2

    run_async(scenario())


def test_put_overwrites_expired_entry():
    async def scenario() -> None:
        clock = _Clock(10.0)
        cache = NamespacedExpiringCache(InMemoryBackingStore(), clock=clock)
        await cache.put("foo", "old", 1)
        clock.advance(3)
        assert cache.has("foo") is False

        await cache.put("foo", "new")
        assert cache.get("foo") == "new"

    run_async(scenario())


def test_forget_removes_key_and_persists():
    async def scenario() -> None:
        store = _RecordingStore()
        cache = NamespacedExpiringCache(store)
        await cache.put("foo", "bar")
        await cache.put("baz", 1)

        assert await cache.forget("foo") is True
        assert cache.keys() == ["baz"]
        assert store.get("cache") == {"baz": {"value": 1}}

    run_async(scenario())


def test_forget_missing_key_is_successful_noop():
    async def scenario() -> None:
        store = _RecordingStore()
        cache = NamespacedExpiringCache(store)
        await cache.put("foo", "bar")
        writes = len(store.updates)

        assert await cache.forget("missing") is True
        assert len(store.updates) == writes
        assert cache.keys() == ["foo"]

    run_async(scenario())


def test_flush_clears_entries_and_removes_namespace():
    async def scenario() -> None:
        store = _RecordingStore()
        cache = NamespacedExpiringCache(store, "ns")
        await cache.put("foo", "bar")
        await cache.put("baz", "qux", 1)

        assert await cache.flush() is True
        assert cache.all() == {}
        assert cache.keys() == []
        assert store.updates[-1] == ("ns", None)
        assert store.get("ns", "absent") == "absent"

    run_async(scenario())


def test_get_expiration_and_is_expired_on_missing_or_permanent_keys():
    async def scenario() -> None:
        cache = NamespacedExpiringCache(InMemoryBackingStore())
        await cache.put("forever", "x")

        assert cache.get_expiration("forever") is None
        assert cache.get_expiration("missing") is None
        assert cache.is_expired("forever") is False
        assert cache.is_expired("missing") is False

    run_async(scenario())


def test_mutations_apply_and_issue_writes_at_call_time():
    async def scenario() -> None:
        store = _RecordingStore()
        cache = NamespacedExpiringCache(store)
        first = cache.put("a", 1)
        second = cache.put("b", 2)

        assert cache.keys() == ["a", "b"]
        assert await first is True
        assert await second is True
        assert len(store.updates) == 2
        assert store.get("cache") == {"a": {"value": 1}, "b": {"value": 2}}

    run_async(scenario())


def test_awaiting_writes_out_of_order_keeps_store_current():
    async def scenario() -> None:
        store = _RecordingStore()
        cache = NamespacedExpiringCache(store)
        first = cache.put("a", 1)
        second = cache.put("b", 2)

        assert await second is True
        assert await first is True
        assert store.get("cache") == {"a": {"value": 1}, "b": {"value": 2}}
        assert NamespacedExpiringCache(store).all() == cache.all()

    run_async(scenario())


def test_unawaited_mutations_still_reach_the_store():
    async def scenario() -> None:
        store = _RecordingStore()
        cache = NamespacedExpiringCache(store)
        cache.put("a", 1)
        cache.put("b", 2)
        cache.forget("a")
        await asyncio.sleep(0.01)

        assert store.get("cache") == {"b": {"value": 2}}

        cache.flush()
        await asyncio.sleep(0.01)
        assert store.get("cache") is None
        assert store.updates[-1] == ("cache", None)

    run_async(scenario())


def test_coroutines_run_outside_a_loop_write_current_state():
    store = _RecordingStore()
    cache = NamespacedExpiringCache(store)
    first = cache.put("a", 1)
    second = cache.put("b", 2)

    assert run_async(second) is True
    assert run_async(first) is True
    assert store.get("cache") == {"a": {"value": 1}, "b": {"value": 2}}


@pytest.mark.parametrize("bad_key", [["k"], {"k": 1}, 1, None])
def test_reads_and_forget_report_results_for_non_string_keys(bad_key):
    store = _RecordingStore()
    cache = NamespacedExpiringCache(store)
    run_async(cache.put("k", "v"))
    writes = len(store.updates)

    assert cache.get(bad_key) is None  # type: ignore[arg-type]
    assert cache.get(bad_key, "fallback") == "fallback"  # type: ignore[arg-type]
    assert cache.has(bad_key) is False  # type: ignore[arg-type]
    assert cache.is_expired(bad_key) is False  # type: ignore[arg-type]
    assert cache.get_expiration(bad_key) is None  # type: ignore[arg-type]
    assert run_async(cache.forget(bad_key)) is True  # type: ignore[arg-type]
    assert len(store.updates) == writes
    assert cache.keys() == ["k"]


def test_integral_float_ttl_sets_expiration():
    clock = _Clock(1_000.2)
    cache = NamespacedExpiringCache(InMemoryBackingStore(), clock=clock)
    assert run_async(cache.put("foo", "bar", 5.0)) is True
    assert cache.get_expiration("foo") == 1_005

    clock.advance(5)
    assert cache.has("foo") is False


def test_store_rejection_is_reported_without_rollback():
    async def scenario() -> None:
        cache = NamespacedExpiringCache(_RejectingStore())
        assert await cache.put("foo", "bar") is False
        assert cache.get("foo") == "bar"
        assert await cache.forget("foo") is False
        assert cache.has("foo") is False
        assert await cache.flush() is False

    run_async(scenario())


def test_store_exception_becomes_false_result(caplog):
    async def scenario() -> None:
        cache = NamespacedExpiringCache(_BrokenStore(), "ns")
        with caplog.at_level("WARNING", logger="nscache.cache"):
            assert await cache.put("foo", "bar") is False
        assert cache.get("foo") == "bar"

    run_async(scenario())
    assert "Backing store update failed for namespace ns" in caplog.text


def test_open_cache_uses_explicit_store_and_settings_namespace():
    async def scenario() -> None:
        store = InMemoryBackingStore()
        await store.update("from-settings", {"foo": {"value": "bar"}})
        settings = CacheSettings(namespace="from-settings")

        cache = await open_cache(store=store, settings=settings)
        assert cache.namespace == "from-settings"
        assert cache.get("foo") == "bar"

        named = await open_cache("other", store=store, settings=settings)
        assert named.namespace == "other"
        assert named.keys() == []

    run_async(scenario())


def test_repr_mentions_namespace_and_backend():
    cache = NamespacedExpiringCache(InMemoryBackingStore(), "ns")
    assert repr(cache) == (
        "NamespacedExpiringCache(namespace='ns', backend='inmemory', entries=0)"
    )
