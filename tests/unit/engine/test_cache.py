"""Tests for the TTL + modification-time parse cache."""

from __future__ import annotations

import pytest

from hubsync.cache import ParseCache
from hubsync.detector import HubDetector
from hubsync.errors import DocumentIOError


@pytest.fixture
def cache(store, clock, hub_text) -> ParseCache:
    store.add("Hub.md", hub_text())
    return ParseCache(HubDetector(store), ttl_seconds=300, clock=clock)


@pytest.mark.asyncio
async def test_second_get_is_served_from_cache(cache, store) -> None:
    first = await cache.get("Hub.md")
    second = await cache.get("Hub.md")

    assert first is second
    assert store.reads == ["Hub.md"]
    assert "Hub.md" in cache
    assert len(cache) == 1


@pytest.mark.asyncio
async def test_entry_expires_after_ttl(cache, store, clock) -> None:
    await cache.get("Hub.md")
    clock.advance(300)
    await cache.get("Hub.md")
    assert len(store.reads) == 1

    clock.advance(1)
    await cache.get("Hub.md")
    assert len(store.reads) == 2


@pytest.mark.asyncio
async def test_modification_invalidates_entry(cache, store, hub_text) -> None:
    first = await cache.get("Hub.md")
    store.add("Hub.md", hub_text(frequency="daily"))

    second = await cache.get("Hub.md")
    assert second is not first
    assert second.update_frequency.value == "daily"


@pytest.mark.asyncio
async def test_clear_single_and_all(cache, store) -> None:
    store.add("Other.md", "#moc\n")
    await cache.get("Hub.md")
    await cache.get("Other.md")

    cache.clear("Hub.md")
    assert "Hub.md" not in cache
    assert "Other.md" in cache

    cache.clear()
    assert len(cache) == 0


@pytest.mark.asyncio
async def test_deleted_document_drops_entry(cache, store) -> None:
    await cache.get("Hub.md")
    del store.docs["Hub.md"]

    with pytest.raises(DocumentIOError):
        await cache.get("Hub.md")
    assert "Hub.md" not in cache
