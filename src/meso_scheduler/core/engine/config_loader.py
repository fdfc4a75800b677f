"""
YAML → typed progression settings.

Loads the progression model settings from progression.yaml (bundled with
the package) and optionally merges user overrides from
~/.meso-scheduler/progression.yaml.

Usage:
    from meso_scheduler.core.engine.config_loader import load_progression_settings
    settings = load_progression_settings()
    settings.modifier_for("too_hard")   # 1.025

If the bundled YAML cannot be parsed, the Python defaults from config.py
are used (no crash). If the user override file exists but has parse
errors, a warning is issued and the file is ignored.
"""

from __future__ import annotations

import importlib.resources
import os
import warnings
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from ..config import (
    DEFAULT_WEIGHT_MODIFIER,
    DIFFICULTY_WEIGHT_MODIFIERS,
    FUZZY_KEYWORDS,
)


@dataclass(frozen=True)
class ProgressionSettings:
    """Tunable inputs of the progression calculator and exercise matcher."""

    modifiers: dict[str, float] = field(
        default_factory=lambda: dict(DIFFICULTY_WEIGHT_MODIFIERS)
    )
    default_modifier: float = DEFAULT_WEIGHT_MODIFIER
    fuzzy_keywords: tuple[str, ...] = FUZZY_KEYWORDS

    def modifier_for(self, difficulty: str) -> float:
        """Weight multiplier for a normalized difficulty value."""
        return self.modifiers.get(difficulty, self.default_modifier)


DEFAULT_SETTINGS = ProgressionSettings()

# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _load_yaml_file(path: Path) -> dict[str, Any]:
    """Load a single YAML file; raise on parse errors, {} for non-mappings."""
    with open(path, "r", encoding="utf-8") as fh:
        data = yaml.safe_load(fh)
    return data if isinstance(data, dict) else {}


def _deep_merge(base: dict, override: dict) -> dict:
    """Recursively merge *override* into *base* (non-destructive to base)."""
    result = dict(base)
    for k, v in override.items():
        if isinstance(v, dict) and isinstance(result.get(k), dict):
            result[k] = _deep_merge(result[k], v)
        else:
            result[k] = v
    return result


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def get_bundled_yaml_path() -> Path | None:
    """Return the path to the bundled progression.yaml, or None if not found."""
    ref = importlib.resources.files("meso_scheduler").joinpath("progression.yaml")
    if ref.is_file():
        return Path(str(ref))
    # Fallback: look relative to this file's package root
    candidate = Path(__file__).parent.parent.parent / "progression.yaml"
    return candidate if candidate.exists() else None


def get_user_yaml_path() -> Path | None:
    """Return ~/.meso-scheduler/progression.yaml if it exists, else None."""
    home = Path(os.environ.get("HOME", "~")).expanduser()
    p = home / ".meso-scheduler" / "progression.yaml"
    return p if p.exists() else None


def load_model_config() -> dict[str, Any]:
    """
    Load and merge progression configuration from YAML sources.

    Load order (later overrides earlier):
    1. Bundled src/meso_scheduler/progression.yaml
    2. User override at ~/.meso-scheduler/progression.yaml

    Returns:
        Merged dict of config sections. Empty dict if no YAML available.
    """
    config: dict[str, Any] = {}

    bundled = get_bundled_yaml_path()
    if bundled is not None:
        try:
            config = _deep_merge(config, _load_yaml_file(bundled))
        except (OSError, yaml.YAMLError) as exc:
            warnings.warn(
                f"meso-scheduler: bundled progression.yaml unreadable ({exc}); "
                "using Python defaults.",
                stacklevel=2,
            )

    user = get_user_yaml_path()
    if user is not None:
        try:
            config = _deep_merge(config, _load_yaml_file(user))
        except (OSError, yaml.YAMLError) as exc:
            warnings.warn(
                f"meso-scheduler: ignoring {user} ({exc})",
                stacklevel=2,
            )

    return config


def settings_from_config(config: dict[str, Any]) -> ProgressionSettings:
    """Build ProgressionSettings from a merged config dict, defaulting missing keys."""
    raw_mods = dict(config.get("weight_modifiers") or {})
    default_modifier = float(raw_mods.pop("default", DEFAULT_WEIGHT_MODIFIER))
    modifiers = dict(DIFFICULTY_WEIGHT_MODIFIERS)
    modifiers.update({str(k): float(v) for k, v in raw_mods.items()})

    keywords = (config.get("matching") or {}).get("fuzzy_keywords")
    fuzzy_keywords = (
        tuple(str(k).lower() for k in keywords) if keywords else FUZZY_KEYWORDS
    )

    return ProgressionSettings(
        modifiers=modifiers,
        default_modifier=default_modifier,
        fuzzy_keywords=fuzzy_keywords,
    )


def load_progression_settings() -> ProgressionSettings:
    """Load YAML config and convert it to ProgressionSettings."""
    try:
        return settings_from_config(load_model_config())
    except (TypeError, ValueError) as exc:
        warnings.warn(
            f"meso-scheduler: invalid progression settings ({exc}); using defaults.",
            stacklevel=2,
        )
        return DEFAULT_SETTINGS
