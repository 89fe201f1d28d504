from __future__ import annotations

import sys
import threading
from dataclasses import dataclass, field
from typing import Iterator, List, Optional

from evdev import InputDevice, ecodes as e, list_devices

from mousetotouch.core.clock import monotonic_ms
from mousetotouch.core.types import Buttons, Phase, PointerSample, ScreenGeometry, clamp


BUTTON_MAP = {
    e.BTN_LEFT: Buttons.PRIMARY,
    e.BTN_RIGHT: Buttons.SECONDARY,
    e.BTN_MIDDLE: Buttons.TERTIARY,
}


@dataclass
class PointerIntegrator:
    """
    Relative mouse events -> absolute screen-space PointerSamples.

    A contact exists only while at least one button is held:
    first press = DOWN, motion while held = MOVE, last release = UP.
    Motion with no button just moves the virtual cursor.
    """
    geometry: ScreenGeometry
    x: float = 0.0
    y: float = 0.0
    buttons: Buttons = Buttons.NONE

    _moved: bool = False
    _pressed: Buttons = Buttons.NONE
    _released: Buttons = Buttons.NONE
    _lock: threading.Lock = field(default_factory=threading.Lock)

    def __post_init__(self) -> None:
        self.x, self.y = self.geometry.center

    def set_geometry(self, geometry: ScreenGeometry) -> None:
        # called from the pipeline thread while the reader thread feeds
        with self._lock:
            self.geometry = geometry
            self.x, self.y = geometry.clamp(self.x, self.y)

    def feed(self, ev_type: int, code: int, value: int, t_ms: int) -> List[PointerSample]:
        """Consume one raw event. Samples only come out on SYN_REPORT."""
        with self._lock:
            return self._feed(ev_type, code, value, t_ms)

    def _feed(self, ev_type: int, code: int, value: int, t_ms: int) -> List[PointerSample]:
        if ev_type == e.EV_REL:
            if code == e.REL_X:
                self.x = clamp(self.x + value, 0.0, float(self.geometry.width))
                self._moved = True
            elif code == e.REL_Y:
                self.y = clamp(self.y + value, 0.0, float(self.geometry.height))
                self._moved = True
            return []

        if ev_type == e.EV_KEY and code in BUTTON_MAP:
            bit = BUTTON_MAP[code]
            if value:  # 1 = press, 2 = autorepeat
                self._pressed |= bit
            else:
                self._released |= bit
            return []

        if ev_type == e.EV_SYN and code == e.SYN_REPORT:
            return self._flush(t_ms)
        return []

    def _flush(self, t_ms: int) -> List[PointerSample]:
        out: List[PointerSample] = []
        before = self.buttons
        held = Buttons(int(before | self._pressed) & ~int(self._released))

        if not before and held:
            # DOWN carries the full mask so a right-press starts a zoom contact
            out.append(PointerSample(self.x, self.y, held, Phase.DOWN, t_ms))
        elif before and held and (self._moved or held != before):
            out.append(PointerSample(self.x, self.y, held, Phase.MOVE, t_ms))
        elif before and not held:
            out.append(PointerSample(self.x, self.y, before, Phase.UP, t_ms))

        self.buttons = held
        self._moved = False
        self._pressed = Buttons.NONE
        self._released = Buttons.NONE
        return out


class EvdevPointerSource:
    """Reads a physical mouse and yields PointerSamples. grab() = translation surface on."""

    def __init__(self, dev: InputDevice, geometry: ScreenGeometry) -> None:
        self.dev = dev
        self.integrator = PointerIntegrator(geometry)
        self.captured = False

    @classmethod
    def open(cls, path: Optional[str], geometry: ScreenGeometry) -> "EvdevPointerSource":
        path = path or auto_detect()
        if path is None:
            sys.exit("[error] No mouse-like input device found. Pass /dev/input/eventN explicitly.")
        try:
            dev = InputDevice(path)
        except PermissionError:
            sys.exit(f"[error] No access to {path}. Run as root or join the 'input' group.")
        except OSError as err:
            sys.exit(f"[error] Failed to open {path}: {err}")
        print(f"[Sensor] reading {dev.path} ({dev.name})")
        return cls(dev, geometry)

    def set_geometry(self, geometry: ScreenGeometry) -> None:
        self.integrator.set_geometry(geometry)

    def set_captured(self, captured: bool) -> None:
        if captured == self.captured:
            return
        try:
            if captured:
                self.dev.grab()
            else:
                self.dev.ungrab()
            self.captured = captured
        except OSError as err:
            print(f"[Sensor] {'grab' if captured else 'ungrab'} failed on {self.dev.path}: {err}")

    def samples(self) -> Iterator[PointerSample]:
        for ev in self.dev.read_loop():
            yield from self.integrator.feed(ev.type, ev.code, ev.value, monotonic_ms())

    def close(self) -> None:
        self.set_captured(False)
        self.dev.close()


def auto_detect() -> Optional[str]:
    for path in list_devices():
        try:
            dev = InputDevice(path)
        except OSError:
            continue
        try:
            caps = dev.capabilities()
            rel = caps.get(e.EV_REL, [])
            keys = caps.get(e.EV_KEY, [])
            if e.REL_X in rel and e.REL_Y in rel and e.BTN_LEFT in keys:
                return path
        finally:
            dev.close()
    return None
