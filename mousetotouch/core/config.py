"""
MouseToTouch — Defaults (Presets)

Two tuned variants ship:
- Default: responsive (10 px / 50 ms)
- Classic: calmer (20 px / 100 ms), slower scroll strokes

Anything here can be overridden from a JSON profile or the CLI.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, replace
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Mapping, Optional


class ConfigError(ValueError):
    pass


class PresetName(str, Enum):
    DEFAULT = "Default"
    CLASSIC = "Classic"


@dataclass(frozen=True)
class MovementTuning:
    threshold_px: float = 10.0    # below this, movement is jitter


@dataclass(frozen=True)
class ThrottleTuning:
    interval_ms: int = 50         # min time between two dispatched gestures


@dataclass(frozen=True)
class ScrollStroke:
    duration_ms: int = 50
    epsilon_px: float = 5.0       # clamped strokes shorter than this on both axes are dropped


@dataclass(frozen=True)
class ZoomStroke:
    gap_px: float = 150.0         # finger start distance from center
    travel_px: float = 400.0      # how far each finger moves
    duration_ms: int = 200


@dataclass(frozen=True)
class Preset:
    name: PresetName
    movement: MovementTuning = MovementTuning()
    throttle: ThrottleTuning = ThrottleTuning()
    scroll: ScrollStroke = ScrollStroke()
    zoom: ZoomStroke = ZoomStroke()

    def validate(self) -> "Preset":
        if self.movement.threshold_px < 0:
            raise ConfigError("threshold_px must be >= 0")
        if self.throttle.interval_ms < 0:
            raise ConfigError("throttle interval_ms must be >= 0")
        if self.scroll.duration_ms <= 0 or self.zoom.duration_ms <= 0:
            raise ConfigError("stroke durations must be > 0")
        if self.scroll.epsilon_px < 0:
            raise ConfigError("epsilon_px must be >= 0")
        if self.zoom.gap_px < 0 or self.zoom.travel_px <= 0:
            raise ConfigError("zoom gap must be >= 0 and travel > 0")
        return self


DEFAULT_PRESET = Preset(
    name=PresetName.DEFAULT,
    movement=MovementTuning(threshold_px=10.0),
    throttle=ThrottleTuning(interval_ms=50),
    scroll=ScrollStroke(duration_ms=50, epsilon_px=5.0),
    zoom=ZoomStroke(gap_px=150.0, travel_px=400.0, duration_ms=200),
)

CLASSIC_PRESET = Preset(
    name=PresetName.CLASSIC,
    movement=MovementTuning(threshold_px=20.0),
    throttle=ThrottleTuning(interval_ms=100),
    scroll=ScrollStroke(duration_ms=100, epsilon_px=5.0),
    zoom=ZoomStroke(gap_px=150.0, travel_px=400.0, duration_ms=200),
)

PRESETS = {
    PresetName.DEFAULT: DEFAULT_PRESET,
    PresetName.CLASSIC: CLASSIC_PRESET,
}


# flat profile key -> (section, field, type)
_OVERRIDES = {
    "threshold_px": ("movement", "threshold_px", float),
    "throttle_ms": ("throttle", "interval_ms", int),
    "scroll_duration_ms": ("scroll", "duration_ms", int),
    "epsilon_px": ("scroll", "epsilon_px", float),
    "zoom_gap_px": ("zoom", "gap_px", float),
    "zoom_travel_px": ("zoom", "travel_px", float),
    "zoom_duration_ms": ("zoom", "duration_ms", int),
}


def apply_overrides(preset: Preset, overrides: Mapping[str, Any]) -> Preset:
    """Return a copy of preset with flat profile keys applied. None values are skipped."""
    sections: Dict[str, Dict[str, Any]] = {}
    for key, value in overrides.items():
        if value is None:
            continue
        if key not in _OVERRIDES:
            raise ConfigError(f"unknown tuning key: {key!r}")
        section, field, cast = _OVERRIDES[key]
        try:
            sections.setdefault(section, {})[field] = cast(value)
        except (TypeError, ValueError) as e:
            raise ConfigError(f"bad value for {key!r}: {value!r}") from e

    changes = {name: replace(getattr(preset, name), **fields) for name, fields in sections.items()}
    return replace(preset, **changes).validate()


def get_preset(name: str) -> Preset:
    for preset_name, preset in PRESETS.items():
        if preset_name.value.lower() == name.lower():
            return preset
    raise ConfigError(f"unknown preset: {name!r} (choose from {', '.join(p.value for p in PRESETS)})")


def default_profile_path() -> Path:
    return Path.home() / ".config" / "mousetotouch" / "profile.json"


def load_profile(path: Optional[Path] = None) -> Optional[dict]:
    p = path or default_profile_path()
    if not p.exists():
        return None
    try:
        data = json.loads(p.read_text())
    except json.JSONDecodeError as e:
        raise ConfigError(f"profile {p} is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"profile {p} must hold a JSON object")
    return data
