from __future__ import annotations
from dataclasses import dataclass, field
from threading import Lock
from typing import Tuple

from mousetotouch.core.types import ModeState


@dataclass
class ModeController:
    """
    Shared control plane.
    ACTIVE means pointer samples are translated into gestures; IDLE drops them.
    Starts IDLE. Only toggle() turns it on.

    stops counts every ACTIVE -> IDLE transition, so a stop followed by a
    re-toggle is still visible to a poller that missed the IDLE state.
    """
    _state: ModeState = ModeState.IDLE
    _stops: int = 0
    _lock: Lock = field(default_factory=Lock)

    @property
    def state(self) -> ModeState:
        with self._lock:
            return self._state

    @property
    def stops(self) -> int:
        with self._lock:
            return self._stops

    def snapshot(self) -> Tuple[ModeState, int]:
        with self._lock:
            return self._state, self._stops

    def is_active(self) -> bool:
        with self._lock:
            return self._state == ModeState.ACTIVE

    def toggle(self) -> ModeState:
        with self._lock:
            if self._state == ModeState.ACTIVE:
                self._state = ModeState.IDLE
                self._stops += 1
            else:
                self._state = ModeState.ACTIVE
            return self._state

    def emergency_stop(self) -> ModeState:
        # idempotent: IDLE stays IDLE
        with self._lock:
            if self._state == ModeState.ACTIVE:
                self._stops += 1
            self._state = ModeState.IDLE
            return self._state
