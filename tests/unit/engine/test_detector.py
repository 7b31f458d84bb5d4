"""Tests for hub classification, living configuration and hub parsing."""

from __future__ import annotations

import pytest

from hubsync.config import DetectionCfg
from hubsync.detector import HubDetector, classify, parse_living_config
from hubsync.errors import DocumentIOError
from hubsync.models import DetectionMethod, UpdateFrequency
from hubsync.parse.frontmatter import build_metadata


# ---------------------------------------------------------------------------
# classify
# ---------------------------------------------------------------------------


def test_field_beats_tag_and_folder() -> None:
    meta = build_metadata("---\ntype: moc\ntags: [moc]\n---\n")
    assert classify("MOCs/Index.md", meta) is DetectionMethod.FIELD


def test_field_value_is_case_insensitive() -> None:
    assert classify("a.md", build_metadata("---\ntype: MOC\n---\n")) is DetectionMethod.FIELD


def test_inline_tag_detection() -> None:
    assert classify("a.md", build_metadata("Index of things #moc\n")) is DetectionMethod.TAG


def test_frontmatter_tag_detection() -> None:
    meta = build_metadata("---\ntags: [moc, other]\n---\n")
    assert classify("a.md", meta) is DetectionMethod.TAG


def test_folder_detection() -> None:
    assert classify("Maps/Travel.md", build_metadata("plain")) is DetectionMethod.FOLDER


def test_exclude_folder_vetoes_folder_detection() -> None:
    options = DetectionCfg(exclude_folders=["MOCs/Archive/"])
    assert classify("MOCs/Archive/Old.md", build_metadata("plain"), options) is None


def test_exclude_folder_does_not_veto_field() -> None:
    options = DetectionCfg(exclude_folders=["MOCs/Archive/"])
    meta = build_metadata("---\ntype: moc\n---\n")
    assert classify("MOCs/Archive/Old.md", meta, options) is DetectionMethod.FIELD


def test_plain_note_is_not_a_hub() -> None:
    assert classify("Notes/idea.md", build_metadata("---\ntype: note\n---\n#idea")) is None


def test_custom_detection_rules() -> None:
    options = DetectionCfg(field_value="index", tag="hub", include_folders=["Index/"])
    assert classify("a.md", build_metadata("---\ntype: index\n---\n"), options) is DetectionMethod.FIELD
    assert classify("a.md", build_metadata("---\ntype: moc\n---\n"), options) is None
    assert classify("Index/x.md", build_metadata(""), options) is DetectionMethod.FOLDER


# ---------------------------------------------------------------------------
# parse_living_config
# ---------------------------------------------------------------------------


def test_living_config_defaults_without_block() -> None:
    cfg = parse_living_config({"type": "moc"})
    assert cfg.auto_gather_seeds is False
    assert cfg.seed_tags == frozenset()
    assert cfg.update_frequency is UpdateFrequency.MANUAL
    assert cfg.is_living is False


def test_living_config_realtime_maps_to_immediate() -> None:
    cfg = parse_living_config(
        {"hubsync": {"auto_gather_seeds": True, "seed_tags": ["a"], "update_frequency": "realtime"}}
    )
    assert cfg.update_frequency is UpdateFrequency.IMMEDIATE
    assert cfg.is_living is True


@pytest.mark.parametrize("value", ["hourly", 3, None, ""])
def test_living_config_invalid_frequency_is_manual(value) -> None:
    cfg = parse_living_config({"hubsync": {"update_frequency": value}})
    assert cfg.update_frequency is UpdateFrequency.MANUAL


def test_living_config_normalizes_seed_tags() -> None:
    cfg = parse_living_config({"hubsync": {"seed_tags": ["#Creativity", " Practice ", 5, ""]}})
    assert cfg.seed_tags == frozenset({"creativity", "practice"})


def test_living_requires_boolean_true_and_tags() -> None:
    assert not parse_living_config({"hubsync": {"auto_gather_seeds": "yes", "seed_tags": ["a"]}}).is_living
    assert not parse_living_config({"hubsync": {"auto_gather_seeds": True, "seed_tags": []}}).is_living


def test_living_config_custom_namespace() -> None:
    fm = {"living": {"auto_gather_seeds": True, "seed_tags": ["a"]}}
    assert parse_living_config(fm, namespace="living").is_living
    assert not parse_living_config(fm).is_living


# ---------------------------------------------------------------------------
# HubDetector
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_parse_living_hub(store, hub_text) -> None:
    store.add("MOCs/Creativity.md", hub_text())
    hub = await HubDetector(store).parse("MOCs/Creativity.md")

    assert hub.title == "Creativity"
    assert hub.detection_method is DetectionMethod.FIELD
    assert hub.is_living is True
    assert hub.auto_gather_seeds is True
    assert hub.seed_tags == frozenset({"creativity"})
    assert hub.update_frequency is UpdateFrequency.IMMEDIATE
    assert hub.region is not None
    assert hub.modified_at == store.mtime("MOCs/Creativity.md")
    assert [h.text for h in hub.headings] == ["Creativity"]


@pytest.mark.asyncio
async def test_parse_living_hub_with_crlf_line_endings(store, hub_text) -> None:
    store.add("MOCs/Hub.md", hub_text().replace("\n", "\r\n"))
    hub = await HubDetector(store).parse("MOCs/Hub.md")

    assert hub.detection_method is DetectionMethod.FIELD
    assert hub.is_living is True
    assert hub.seed_tags == frozenset({"creativity"})
    assert hub.region is not None


@pytest.mark.asyncio
async def test_parse_links_carry_heading_and_region(store, hub_text) -> None:
    store.add("Hub.md", hub_text(region='\n- [[Old Seed]] - "x"\n'))
    hub = await HubDetector(store).parse("Hub.md")

    by_target = {link.target_path: link for link in hub.links}
    assert by_target["Old Seed"].in_region is True
    assert by_target["Old Seed"].heading == "Gathered"
    assert by_target["Manual Link"].in_region is False
    assert by_target["Manual Link"].heading == "Notes"
    assert [link.target_path for link in hub.region_links] == ["Old Seed"]


@pytest.mark.asyncio
async def test_parse_hub_without_region(store) -> None:
    store.add("Hub.md", "---\ntype: moc\n---\n# Hub\n[[A]]\n")
    hub = await HubDetector(store).parse("Hub.md")

    assert hub.region is None
    assert hub.links[0].in_region is False


@pytest.mark.asyncio
async def test_parse_non_hub_has_no_detection_method(store) -> None:
    store.add("Notes/plain.md", "Just a note.\n")
    hub = await HubDetector(store).parse("Notes/plain.md")
    assert hub.detection_method is None
    assert hub.is_living is False


@pytest.mark.asyncio
async def test_parse_missing_document_raises(store) -> None:
    with pytest.raises(DocumentIOError, match="Gone.md"):
        await HubDetector(store).parse("Gone.md")


def test_hub_paths(store, hub_text) -> None:
    store.add("MOCs/Creativity.md", hub_text())
    store.add("Notes/idea.md", "#seed idea\n")
    store.add("Index.md", "#moc\n")

    assert HubDetector(store).hub_paths() == ["Index.md", "MOCs/Creativity.md"]


def test_hub_paths_skips_unindexable_documents(store, monkeypatch) -> None:
    store.add("Broken.md", "#moc\n")
    store.add("Good.md", "#moc\n")
    original = store.metadata

    def flaky(path: str):
        if path == "Broken.md":
            raise OSError("boom")
        return original(path)

    monkeypatch.setattr(store, "metadata", flaky)
    assert HubDetector(store).hub_paths() == ["Good.md"]
