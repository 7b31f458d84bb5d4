"""Tests for the debounced change watcher."""

from __future__ import annotations

import asyncio

import pytest

from hubsync.config import HubsyncConfig
from hubsync.engine import HubEngine

DEBOUNCE = 0.02


@pytest.fixture
def live_engine(store, clock, notifications, seed_text, hub_text) -> HubEngine:
    cfg = HubsyncConfig()
    cfg.updater.debounce_seconds = DEBOUNCE
    store.add("MOCs/Live.md", hub_text())
    store.add("MOCs/Daily.md", hub_text(frequency="daily"))
    store.add("Seeds/Idea.md", seed_text("An idea"))
    return HubEngine(store, cfg, notifier=notifications.append, clock=clock)


def _count_rounds(engine: HubEngine) -> list:
    calls = []
    original = engine.scheduler.living_hubs

    async def counting(frequency=None):
        calls.append(frequency)
        return await original(frequency)

    engine.scheduler.living_hubs = counting
    return calls


async def _settle(engine: HubEngine) -> None:
    await asyncio.sleep(DEBOUNCE * 5)
    await engine.watch().drain()


@pytest.mark.asyncio
async def test_seed_change_updates_immediate_hubs_only(live_engine, store, notifications) -> None:
    watcher = live_engine.watch()
    assert watcher.running

    store.emit("modify", "Seeds/Idea.md")
    await _settle(live_engine)

    assert "[[Idea]]" in store.docs["MOCs/Live.md"]
    assert "[[Idea]]" not in store.docs["MOCs/Daily.md"]
    assert notifications == []
    live_engine.close()


@pytest.mark.asyncio
async def test_burst_of_events_is_debounced(live_engine, store) -> None:
    rounds = _count_rounds(live_engine)
    watcher = live_engine.watch()

    for _ in range(5):
        store.emit("modify", "Seeds/Idea.md")
    assert watcher.pending_paths == ["Seeds/Idea.md"]

    await _settle(live_engine)
    assert len(rounds) == 1
    assert watcher.pending_paths == []
    live_engine.close()


@pytest.mark.asyncio
async def test_each_seed_path_has_its_own_timer(live_engine, store, seed_text) -> None:
    store.add("Seeds/Other.md", seed_text("Another"))
    rounds = _count_rounds(live_engine)
    watcher = live_engine.watch()

    store.emit("create", "Seeds/Idea.md")
    store.emit("create", "Seeds/Other.md")
    assert watcher.pending_paths == ["Seeds/Idea.md", "Seeds/Other.md"]

    await _settle(live_engine)
    assert len(rounds) == 2
    live_engine.close()


@pytest.mark.asyncio
async def test_non_seed_and_non_markdown_events_are_ignored(live_engine, store) -> None:
    store.add("Notes/plain.md", "no tags")
    watcher = live_engine.watch()

    store.emit("modify", "Notes/plain.md")
    store.emit("modify", "MOCs/Live.md")
    store.emit("modify", "Seeds/image.png")
    assert watcher.pending_paths == []
    live_engine.close()


@pytest.mark.asyncio
async def test_close_cancels_pending_timers(live_engine, store) -> None:
    watcher = live_engine.watch()
    store.emit("modify", "Seeds/Idea.md")

    live_engine.close()
    assert watcher.pending_paths == []
    assert not watcher.running
    assert store.callbacks == []

    await asyncio.sleep(DEBOUNCE * 5)
    assert store.writes == []


@pytest.mark.asyncio
async def test_failed_hub_does_not_stop_round(live_engine, store, hub_text) -> None:
    store.add("MOCs/Broken.md", hub_text())
    store.fail_writes.add("MOCs/Broken.md")
    live_engine.watch()

    store.emit("modify", "Seeds/Idea.md")
    await _settle(live_engine)

    assert "[[Idea]]" in store.docs["MOCs/Live.md"]
    live_engine.close()


@pytest.mark.asyncio
async def test_watch_is_started_once(live_engine, store) -> None:
    first = live_engine.watch()
    second = live_engine.watch()
    assert first is second
    assert len(store.callbacks) == 1
    live_engine.close()


@pytest.mark.asyncio
async def test_unexpected_error_in_one_hub_is_logged_and_round_continues(
    live_engine, store, hub_text
) -> None:
    store.add("MOCs/Broken.md", hub_text())
    original = live_engine.scheduler.update_one

    async def flaky(path, options=None):
        if path == "MOCs/Broken.md":
            raise ValueError("unexpected")
        return await original(path, options)

    live_engine.scheduler.update_one = flaky
    live_engine.watch()

    store.emit("modify", "Seeds/Idea.md")
    await _settle(live_engine)

    assert "[[Idea]]" in store.docs["MOCs/Live.md"]
    assert "[[Idea]]" not in store.docs["MOCs/Broken.md"]
    live_engine.close()
