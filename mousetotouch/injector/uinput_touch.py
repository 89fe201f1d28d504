from __future__ import annotations

import itertools
import threading
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, Optional

from evdev import AbsInfo, UInput, ecodes as e

from mousetotouch.core.types import GestureRequest, ScreenGeometry
from mousetotouch.injector.playback import touch_frames


MAX_SLOTS = 2


def build_device(geometry: ScreenGeometry) -> UInput:
    """MT protocol type B touchscreen whose axes match the screen in pixels."""
    def axis(hi: int) -> AbsInfo:
        return AbsInfo(value=0, min=0, max=hi, fuzz=0, flat=0, resolution=0)

    caps = {
        e.EV_KEY: [e.BTN_TOUCH],
        e.EV_ABS: [
            (e.ABS_X, axis(geometry.width)),
            (e.ABS_Y, axis(geometry.height)),
            (e.ABS_MT_SLOT, axis(MAX_SLOTS - 1)),
            (e.ABS_MT_TRACKING_ID, axis(65535)),
            (e.ABS_MT_POSITION_X, axis(geometry.width)),
            (e.ABS_MT_POSITION_Y, axis(geometry.height)),
        ],
    }
    return UInput(caps, name="MouseToTouch Virtual Touchscreen", input_props=[e.INPUT_PROP_DIRECT])


@dataclass
class UInputTouchscreen:
    """
    Virtual multitouch touchscreen on Linux uinput.

    One gesture plays at a time on a worker thread. At most one more waits
    behind it: a newer dispatch replaces the waiting one, so a fast drag
    never builds a backlog. cancel_pending() drops the waiting gesture;
    the one already on the glass finishes.
    """
    ui: UInput
    frame_ms: int = 8
    factory: Optional[Callable[[ScreenGeometry], UInput]] = None

    played: int = 0
    replaced: int = 0

    _cond: threading.Condition = field(default_factory=threading.Condition)
    _io: threading.Lock = field(default_factory=threading.Lock)
    _pending: Optional[GestureRequest] = None
    _closed: bool = False
    _worker: Optional[threading.Thread] = None
    _ids: itertools.count = field(default_factory=lambda: itertools.count(1))
    _touching: bool = False
    _busy: bool = False

    @classmethod
    def create(cls, geometry: ScreenGeometry, frame_ms: int = 8) -> "UInputTouchscreen":
        ts = cls(ui=build_device(geometry), frame_ms=frame_ms)
        ts.start()
        return ts

    def start(self) -> None:
        if self._worker is not None:
            return
        self._worker = threading.Thread(target=self._run, name="touch-player", daemon=True)
        self._worker.start()

    @property
    def pending(self) -> Optional[GestureRequest]:
        with self._cond:
            return self._pending

    @property
    def idle(self) -> bool:
        with self._cond:
            return self._pending is None and not self._busy

    def dispatch(self, request: GestureRequest) -> None:
        with self._cond:
            if self._pending is not None:
                self.replaced += 1
            self._pending = request
            self._cond.notify()

    def cancel_pending(self) -> None:
        with self._cond:
            self._pending = None

    def set_geometry(self, geometry: ScreenGeometry) -> None:
        # axis maxima are fixed at creation: swap in a re-capped device between gestures
        fresh = (self.factory or build_device)(geometry)
        with self._io:
            old, self.ui = self.ui, fresh
            self._touching = False
        old.close()
        print(f"[Touch] touchscreen resized to {geometry.width}x{geometry.height}")

    def close(self) -> None:
        with self._cond:
            self._closed = True
            self._pending = None
            self._cond.notify_all()
        if self._worker is not None:
            self._worker.join(timeout=2.0)
            self._worker = None
        with self._io:
            self.ui.close()

    def _next(self) -> Optional[GestureRequest]:
        with self._cond:
            while self._pending is None and not self._closed:
                self._cond.wait()
            if self._closed:
                return None
            req, self._pending = self._pending, None
            self._busy = True
            return req

    def _run(self) -> None:
        while True:
            req = self._next()
            if req is None:
                return
            try:
                self._play_locked(req)
            finally:
                with self._cond:
                    self._busy = False

    def _play_locked(self, req: GestureRequest) -> None:
        with self._io:
            try:
                self._play(req)
            except OSError as err:
                print(f"[Touch] playback failed: {err}")
                try:
                    self._lift_all({})
                except OSError as lift_err:
                    print(f"[Touch] could not lift contacts: {lift_err}")
            else:
                self.played += 1

    def _play(self, req: GestureRequest) -> None:
        active: Dict[int, int] = {}  # slot -> tracking id
        t0 = time.monotonic()

        for t_ms, contacts in touch_frames(req, self.frame_ms):
            # pace frames against the gesture's own timeline
            delay = t0 + t_ms / 1000.0 - time.monotonic()
            if delay > 0:
                time.sleep(delay)

            for slot in list(active):
                if slot not in contacts:
                    self.ui.write(e.EV_ABS, e.ABS_MT_SLOT, slot)
                    self.ui.write(e.EV_ABS, e.ABS_MT_TRACKING_ID, -1)
                    del active[slot]

            for slot, (x, y) in contacts.items():
                self.ui.write(e.EV_ABS, e.ABS_MT_SLOT, slot)
                if slot not in active:
                    active[slot] = next(self._ids) & 0xFFFF
                    self.ui.write(e.EV_ABS, e.ABS_MT_TRACKING_ID, active[slot])
                self.ui.write(e.EV_ABS, e.ABS_MT_POSITION_X, int(round(x)))
                self.ui.write(e.EV_ABS, e.ABS_MT_POSITION_Y, int(round(y)))

            self._set_touch(bool(contacts))
            if contacts:
                # single-touch emulation follows the first contact
                x, y = contacts[min(contacts)]
                self.ui.write(e.EV_ABS, e.ABS_X, int(round(x)))
                self.ui.write(e.EV_ABS, e.ABS_Y, int(round(y)))
            self.ui.syn()

        self._lift_all(active)

    def _set_touch(self, down: bool) -> None:
        if down != self._touching:
            self.ui.write(e.EV_KEY, e.BTN_TOUCH, 1 if down else 0)
            self._touching = down

    def _lift_all(self, active: Dict[int, int]) -> None:
        # Make absolutely sure no finger is stuck down.
        for slot in list(active) or range(MAX_SLOTS):
            self.ui.write(e.EV_ABS, e.ABS_MT_SLOT, slot)
            self.ui.write(e.EV_ABS, e.ABS_MT_TRACKING_ID, -1)
        self._touching = True
        self._set_touch(False)
        self.ui.syn()
