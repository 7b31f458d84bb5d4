"""hubsync configuration loader.

Priority (high → low):
  1. CLI flags           (handled at the call site, not here)
  2. Environment variables  (HUBSYNC_DEBOUNCE_SECONDS, HUBSYNC_LOG_LEVEL)
  3. Per-vault hubsync.yaml  (vault root)
  4. Global ~/.hubsync/config.yaml
  5. Hardcoded defaults

All YAML reads use yaml.safe_load(), never yaml.load().
"""

from __future__ import annotations

import os
import warnings
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from hubsync.parse.region import DEFAULT_BEGIN_MARKER, DEFAULT_END_MARKER, Markers

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

_GLOBAL_CONFIG_DIR: Path = Path.home() / ".hubsync"
_GLOBAL_CONFIG_PATH: Path = _GLOBAL_CONFIG_DIR / "config.yaml"
_PROJECT_CONFIG_NAME: str = "hubsync.yaml"

# Known top-level sections; unknown keys produce a warning
_KNOWN_SECTIONS: frozenset[str] = frozenset(
    ["markers", "detection", "living", "updater", "logging"]
)

DEFAULT_HUB_FOLDERS: tuple[str, ...] = (
    "MOCs/",
    "Maps/",
    "Map of Contents/",
    "00 Maps/",
    "_MOCs/",
)

_LOG_FORMATS: frozenset[str] = frozenset(["console", "json"])


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class ConfigError(ValueError):
    """Raised when a config file contains an invalid value."""


# ---------------------------------------------------------------------------
# Data model
# ---------------------------------------------------------------------------


@dataclass
class MarkersCfg:
    """Managed-region markers (hubsync.yaml: markers:)."""

    begin: str = DEFAULT_BEGIN_MARKER
    end: str = DEFAULT_END_MARKER

    def to_markers(self) -> Markers:
        return Markers(begin=self.begin, end=self.end)


@dataclass
class DetectionCfg:
    """Hub classification rules (hubsync.yaml: detection:).

    Attributes:
        field_value: Expected value of the frontmatter ``type`` field.
        tag: Tag that marks a document as a hub (inline or frontmatter).
        include_folders: Path substrings that mark a document as a hub.
        exclude_folders: Path substrings that veto folder-based detection.
    """

    field_value: str = "moc"
    tag: str = "moc"
    include_folders: list[str] = field(default_factory=lambda: list(DEFAULT_HUB_FOLDERS))
    exclude_folders: list[str] = field(default_factory=list)


@dataclass
class LivingCfg:
    """Living-hub behaviour (hubsync.yaml: living:).

    Attributes:
        namespace: Frontmatter key holding the per-hub living configuration.
        seed_tags: Tags that make a document a seed (change watcher filter).
        boilerplate_tags: Tags left out of generated seed lines.
        excerpt_length: Maximum excerpt length in a generated seed line.
    """

    namespace: str = "hubsync"
    seed_tags: list[str] = field(default_factory=lambda: ["seed", "hub-seed"])
    boilerplate_tags: list[str] = field(default_factory=lambda: ["seed", "moc"])
    excerpt_length: int = 60


@dataclass
class UpdaterCfg:
    """Update scheduling (hubsync.yaml: updater:)."""

    max_history: int = 10
    cache_ttl_seconds: float = 300.0
    debounce_seconds: float = 5.0


@dataclass
class LoggingCfg:
    """Logging output (hubsync.yaml: logging:)."""

    level: str = "INFO"
    format: str = "console"  # console | json


@dataclass
class HubsyncConfig:
    """Root configuration object, built by load_config() from merged YAML layers."""

    markers: MarkersCfg = field(default_factory=MarkersCfg)
    detection: DetectionCfg = field(default_factory=DetectionCfg)
    living: LivingCfg = field(default_factory=LivingCfg)
    updater: UpdaterCfg = field(default_factory=UpdaterCfg)
    logging: LoggingCfg = field(default_factory=LoggingCfg)


# ---------------------------------------------------------------------------
# Validation helpers
# ---------------------------------------------------------------------------


def _warn_unknown_keys(data: dict[str, Any], source: Path) -> None:
    """Emit a UserWarning for unrecognised top-level keys."""
    for key in data:
        if key not in _KNOWN_SECTIONS:
            warnings.warn(
                f"Unknown config key '{key}' in '{source}' (ignored).",
                UserWarning,
                stacklevel=4,
            )


def _str_list(value: Any, key: str) -> list[str]:
    if isinstance(value, str):
        return [value]
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ConfigError(f"'{key}' must be a list of strings, got: {value!r}")
    return list(value)


def _validate(cfg: HubsyncConfig) -> None:
    """Raise ConfigError for values the engine cannot work with."""
    if not cfg.markers.begin or not cfg.markers.end:
        raise ConfigError("markers.begin and markers.end must be non-empty strings.")
    if cfg.markers.begin == cfg.markers.end:
        raise ConfigError(
            f"markers.begin and markers.end must differ (both are '{cfg.markers.begin}')."
        )
    if cfg.updater.max_history < 1:
        raise ConfigError(f"updater.max_history must be >= 1, got {cfg.updater.max_history}.")
    if cfg.updater.debounce_seconds < 0:
        raise ConfigError(
            f"updater.debounce_seconds must be >= 0, got {cfg.updater.debounce_seconds}."
        )
    if cfg.updater.cache_ttl_seconds < 0:
        raise ConfigError(
            f"updater.cache_ttl_seconds must be >= 0, got {cfg.updater.cache_ttl_seconds}."
        )
    if cfg.living.excerpt_length < 1:
        raise ConfigError(f"living.excerpt_length must be >= 1, got {cfg.living.excerpt_length}.")
    if cfg.logging.format not in _LOG_FORMATS:
        raise ConfigError(
            f"logging.format must be one of {sorted(_LOG_FORMATS)}, got '{cfg.logging.format}'."
        )


# ---------------------------------------------------------------------------
# Merge + build
# ---------------------------------------------------------------------------


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Return a new dict that is *base* deep-merged with *override*."""
    result = dict(base)
    for k, v in override.items():
        if k in result and isinstance(result[k], dict) and isinstance(v, dict):
            result[k] = _deep_merge(result[k], v)
        else:
            result[k] = v
    return result


def _cfg_from_dict(data: dict[str, Any]) -> HubsyncConfig:
    """Build a *HubsyncConfig* from a merged raw YAML dict."""
    cfg = HubsyncConfig()

    if "markers" in data:
        m = data["markers"] or {}
        cfg.markers = MarkersCfg(
            begin=str(m.get("begin", cfg.markers.begin)),
            end=str(m.get("end", cfg.markers.end)),
        )

    if "detection" in data:
        d = data["detection"] or {}
        cfg.detection = DetectionCfg(
            field_value=str(d.get("field_value", cfg.detection.field_value)),
            tag=str(d.get("tag", cfg.detection.tag)),
            include_folders=_str_list(
                d.get("include_folders", cfg.detection.include_folders),
                "detection.include_folders",
            ),
            exclude_folders=_str_list(
                d.get("exclude_folders", cfg.detection.exclude_folders),
                "detection.exclude_folders",
            ),
        )

    if "living" in data:
        lv = data["living"] or {}
        cfg.living = LivingCfg(
            namespace=str(lv.get("namespace", cfg.living.namespace)),
            seed_tags=_str_list(lv.get("seed_tags", cfg.living.seed_tags), "living.seed_tags"),
            boilerplate_tags=_str_list(
                lv.get("boilerplate_tags", cfg.living.boilerplate_tags),
                "living.boilerplate_tags",
            ),
            excerpt_length=int(lv.get("excerpt_length", cfg.living.excerpt_length)),
        )

    if "updater" in data:
        u = data["updater"] or {}
        cfg.updater = UpdaterCfg(
            max_history=int(u.get("max_history", cfg.updater.max_history)),
            cache_ttl_seconds=float(u.get("cache_ttl_seconds", cfg.updater.cache_ttl_seconds)),
            debounce_seconds=float(u.get("debounce_seconds", cfg.updater.debounce_seconds)),
        )

    if "logging" in data:
        lg = data["logging"] or {}
        cfg.logging = LoggingCfg(
            level=str(lg.get("level", cfg.logging.level)).upper(),
            format=str(lg.get("format", cfg.logging.format)).lower(),
        )

    return cfg


def _apply_env_overrides(cfg: HubsyncConfig) -> HubsyncConfig:
    """Apply HUBSYNC_* environment variable overrides."""
    if debounce := os.environ.get("HUBSYNC_DEBOUNCE_SECONDS"):
        try:
            cfg.updater.debounce_seconds = float(debounce)
        except ValueError:
            raise ConfigError(
                f"HUBSYNC_DEBOUNCE_SECONDS must be a number, got '{debounce}'."
            ) from None
    if level := os.environ.get("HUBSYNC_LOG_LEVEL"):
        cfg.logging.level = level.upper()
    return cfg


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Config file '{path}' is not valid YAML: {exc}") from exc
    if not isinstance(raw, dict):
        raise ConfigError(f"Config file '{path}' must contain a mapping at the top level.")
    return raw


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def load_config(
    vault_dir: Path | None = None,
    *,
    global_config_path: Path | None = None,
) -> HubsyncConfig:
    """Load and return a merged *HubsyncConfig*.

    Applies layers in order: global → per-vault → env vars.
    CLI flag overrides must be applied by the caller after this function.

    Args:
        vault_dir: Directory to search for *hubsync.yaml*. Defaults to CWD.
        global_config_path: Override the global config path (for testing).

    Returns:
        Fully merged and validated *HubsyncConfig*.

    Raises:
        ConfigError: If a config file is not valid YAML or holds an invalid value.
    """
    global_path = global_config_path if global_config_path is not None else _GLOBAL_CONFIG_PATH
    search_dir = vault_dir if vault_dir is not None else Path.cwd()

    merged: dict[str, Any] = {}

    # Layer 1: global config
    if global_path.exists():
        raw_global = _read_yaml(global_path)
        _warn_unknown_keys(raw_global, global_path)
        merged = _deep_merge(merged, raw_global)

    # Layer 2: per-vault config
    project_cfg_path = search_dir / _PROJECT_CONFIG_NAME
    if project_cfg_path.exists():
        raw_project = _read_yaml(project_cfg_path)
        _warn_unknown_keys(raw_project, project_cfg_path)
        merged = _deep_merge(merged, raw_project)

    try:
        cfg = _cfg_from_dict(merged)
    except ConfigError:
        raise
    except (AttributeError, TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid config value: {exc}") from exc

    # Layer 3: env var overrides
    cfg = _apply_env_overrides(cfg)

    _validate(cfg)
    return cfg
