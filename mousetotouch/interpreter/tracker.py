from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from mousetotouch.core.types import Delta, Phase, PointerSample


@dataclass
class TrackState:
    anchor_x: float = 0.0
    anchor_y: float = 0.0
    last_dispatch_ms: Optional[int] = None   # None = nothing dispatched since DOWN


class PointerTracker:
    """
    Anchor bookkeeping for one continuous contact.

    DOWN sets the anchor, MOVE measures against it, UP/CANCEL abandons it.
    The tracker never dispatches anything; after a gesture goes out the
    caller MUST rebase() so the next delta starts from the current point.
    """

    def __init__(self) -> None:
        self.track: Optional[TrackState] = None
        self._last_t_ms: Optional[int] = None

    @property
    def in_contact(self) -> bool:
        return self.track is not None

    def reset(self) -> None:
        self.track = None

    def on_sample(self, sample: PointerSample) -> Optional[Delta]:
        # malformed samples are dropped without touching state
        if not sample.is_well_formed():
            return None
        if self._last_t_ms is not None and sample.t_ms < self._last_t_ms:
            return None
        self._last_t_ms = sample.t_ms

        if sample.phase == Phase.DOWN:
            self.track = TrackState(anchor_x=sample.x, anchor_y=sample.y, last_dispatch_ms=None)
            return None

        if sample.phase in (Phase.UP, Phase.CANCEL):
            self.track = None
            return None

        if self.track is None:
            # MOVE without a DOWN (or after UP / emergency stop)
            return None

        elapsed = None
        if self.track.last_dispatch_ms is not None:
            elapsed = sample.t_ms - self.track.last_dispatch_ms

        return Delta(
            anchor_x=self.track.anchor_x,
            anchor_y=self.track.anchor_y,
            x=sample.x,
            y=sample.y,
            elapsed_ms=elapsed,
        )

    def rebase(self, x: float, y: float, t_ms: int) -> None:
        if self.track is None:
            self.track = TrackState()
        self.track.anchor_x = x
        self.track.anchor_y = y
        self.track.last_dispatch_ms = t_ms
