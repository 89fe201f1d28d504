import json
import threading

import pytest

from mousetotouch.core.clock import ManualClock, monotonic_ms
from mousetotouch.core.config import (
    CLASSIC_PRESET, DEFAULT_PRESET, ConfigError, PresetName,
    apply_overrides, get_preset, load_profile,
)
from mousetotouch.core.control import ModeController
from mousetotouch.core.types import ModeState, ScreenGeometry, StrokePath


def test_starts_idle_and_toggles():
    c = ModeController()
    assert c.state == ModeState.IDLE
    assert not c.is_active()
    assert c.toggle() == ModeState.ACTIVE
    assert c.is_active()
    assert c.toggle() == ModeState.IDLE


def test_emergency_stop_is_one_way_and_idempotent():
    c = ModeController()
    # stop never turns anything on
    assert c.emergency_stop() == ModeState.IDLE
    c.toggle()
    assert c.emergency_stop() == ModeState.IDLE
    assert c.emergency_stop() == ModeState.IDLE
    assert not c.is_active()


def test_stops_count_only_real_transitions():
    c = ModeController()
    c.emergency_stop()
    assert c.stops == 0
    c.toggle()
    c.toggle()
    assert c.snapshot() == (ModeState.IDLE, 1)
    c.toggle()
    c.emergency_stop()
    c.emergency_stop()
    assert c.snapshot() == (ModeState.IDLE, 2)


def test_controller_survives_concurrent_toggles():
    c = ModeController()

    def flip():
        for _ in range(1000):
            c.toggle()

    threads = [threading.Thread(target=flip) for _ in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    # 4000 flips: even, back where we started
    assert c.state == ModeState.IDLE


def test_presets_expose_both_variants():
    assert DEFAULT_PRESET.movement.threshold_px == 10
    assert DEFAULT_PRESET.throttle.interval_ms == 50
    assert CLASSIC_PRESET.movement.threshold_px == 20
    assert CLASSIC_PRESET.throttle.interval_ms == 100
    assert get_preset("classic") is CLASSIC_PRESET
    assert get_preset("Default").name == PresetName.DEFAULT
    with pytest.raises(ConfigError):
        get_preset("turbo")


def test_overrides_return_new_preset():
    p = apply_overrides(DEFAULT_PRESET, {"threshold_px": 15, "zoom_travel_px": "300", "throttle_ms": None})
    assert p.movement.threshold_px == 15.0
    assert p.zoom.travel_px == 300.0
    assert p.zoom.gap_px == DEFAULT_PRESET.zoom.gap_px
    assert p.throttle.interval_ms == 50
    # the shipped preset is untouched
    assert DEFAULT_PRESET.movement.threshold_px == 10


@pytest.mark.parametrize("bad", [
    {"nope": 1},
    {"threshold_px": "abc"},
    {"throttle_ms": -1},
    {"zoom_duration_ms": 0},
    {"zoom_travel_px": 0},
])
def test_bad_overrides_raise(bad):
    with pytest.raises(ConfigError):
        apply_overrides(DEFAULT_PRESET, bad)


def test_load_profile(tmp_path):
    assert load_profile(tmp_path / "missing.json") is None

    p = tmp_path / "profile.json"
    p.write_text(json.dumps({"threshold_px": 12, "throttle_ms": 80}))
    prof = load_profile(p)
    assert apply_overrides(DEFAULT_PRESET, prof).throttle.interval_ms == 80

    p.write_text("[1, 2]")
    with pytest.raises(ConfigError):
        load_profile(p)
    p.write_text("{not json")
    with pytest.raises(ConfigError):
        load_profile(p)


def test_clocks():
    clock = ManualClock(now_ms=100)
    assert clock() == 100
    assert clock.advance(25) == 125
    a = monotonic_ms()
    assert monotonic_ms() >= a


def test_value_types_reject_nonsense():
    with pytest.raises(ValueError):
        ScreenGeometry(0, 100)
    with pytest.raises(ValueError):
        StrokePath(points=((0, 0),), duration_ms=50)
    with pytest.raises(ValueError):
        StrokePath(points=((0, 0), (1, 1)), duration_ms=0)


def test_stroke_interpolation():
    s = StrokePath(points=((0, 0), (100, 0), (100, 100)), duration_ms=200)
    assert s.point_at(0) == (0, 0)
    assert s.point_at(50) == (50, 0)
    assert s.point_at(100) == (100, 0)
    assert s.point_at(150) == (100, 50)
    assert s.point_at(500) == (100, 100)
