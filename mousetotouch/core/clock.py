from __future__ import annotations

import time
from dataclasses import dataclass


def monotonic_ms() -> int:
    # throttling compares elapsed time, never wall-clock time
    return int(time.monotonic() * 1000)


@dataclass
class ManualClock:
    """Deterministic clock for replay and tests."""
    now_ms: int = 0

    def __call__(self) -> int:
        return self.now_ms

    def advance(self, ms: int) -> int:
        self.now_ms += int(ms)
        return self.now_ms
