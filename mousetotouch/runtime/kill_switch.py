from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Protocol

from mousetotouch.core.types import ModeState
from mousetotouch.interpreter.pipeline import Pipeline


class Capturable(Protocol):
    def set_captured(self, captured: bool) -> None: ...


@dataclass
class KillSwitch:
    """
    Central safety gate, run on the pipeline thread.
    Hotkeys and the tray flip the ModeController from their own threads;
    guard() turns those flips into side effects before the next sample:
      - any stop since the last guard: drop the anchor and waiting gestures
      - ACTIVE: capture the pointer (translation surface on)
      - IDLE:   release the pointer

    Stops are counted, not sampled: a stop followed by a re-toggle between
    two guards still drops the old drag.
    The only place mode transitions are logged.
    """
    pipeline: Pipeline
    source: Optional[Capturable] = None

    _last_state: ModeState = ModeState.IDLE
    _last_stops: int = 0

    def guard(self) -> ModeState:
        state, stops = self.pipeline.control.snapshot()

        if stops != self._last_stops:
            self._last_stops = stops
            # hard stop: never resume a stale drag, never play a queued gesture
            self.pipeline.tracker.reset()
            self.pipeline.executor.cancel_pending()
            if state == ModeState.ACTIVE:
                print("[Mode] IDLE -> ACTIVE (stopped and re-enabled)")

        if state == self._last_state:
            return state

        self._last_state = state
        if self.source is not None:
            self.source.set_captured(state == ModeState.ACTIVE)
        print(f"[Mode] {state.value}")
        return state
