import math

from mousetotouch.core.types import Buttons, Phase, PointerSample
from mousetotouch.interpreter.tracker import PointerTracker


def sample(phase, x, y, t, buttons=Buttons.PRIMARY):
    return PointerSample(x=x, y=y, buttons=buttons, phase=phase, t_ms=t)


def test_down_sets_anchor_without_delta():
    tr = PointerTracker()
    assert tr.on_sample(sample(Phase.DOWN, 100, 100, 0)) is None
    assert tr.in_contact

    d = tr.on_sample(sample(Phase.MOVE, 100, 130, 60))
    assert (d.anchor_x, d.anchor_y) == (100, 100)
    assert (d.dx, d.dy) == (0, 30)
    assert d.elapsed_ms is None


def test_rebase_moves_anchor_and_dispatch_time():
    tr = PointerTracker()
    tr.on_sample(sample(Phase.DOWN, 100, 100, 0))
    tr.on_sample(sample(Phase.MOVE, 100, 130, 60))
    tr.rebase(100, 130, 60)

    d = tr.on_sample(sample(Phase.MOVE, 110, 150, 100))
    assert (d.anchor_x, d.anchor_y) == (100, 130)
    assert (d.dx, d.dy) == (10, 20)
    assert d.elapsed_ms == 40


def test_down_resets_last_dispatch():
    tr = PointerTracker()
    tr.on_sample(sample(Phase.DOWN, 0, 0, 0))
    tr.rebase(50, 50, 10)
    tr.on_sample(sample(Phase.DOWN, 200, 200, 20))
    d = tr.on_sample(sample(Phase.MOVE, 210, 200, 25))
    assert d.anchor_x == 200
    assert d.elapsed_ms is None


def test_up_abandons_anchor():
    tr = PointerTracker()
    tr.on_sample(sample(Phase.DOWN, 10, 10, 0))
    assert tr.on_sample(sample(Phase.UP, 40, 40, 10)) is None
    assert not tr.in_contact
    assert tr.on_sample(sample(Phase.MOVE, 80, 80, 20)) is None

    tr.on_sample(sample(Phase.DOWN, 10, 10, 30))
    assert tr.on_sample(sample(Phase.CANCEL, 40, 40, 40)) is None
    assert tr.on_sample(sample(Phase.MOVE, 80, 80, 50)) is None


def test_malformed_samples_are_ignored():
    tr = PointerTracker()
    tr.on_sample(sample(Phase.DOWN, 100, 100, 100))

    assert tr.on_sample(sample(Phase.MOVE, math.nan, 100, 110)) is None
    assert tr.on_sample(sample(Phase.MOVE, 100, math.inf, 120)) is None
    assert tr.on_sample(sample(Phase.MOVE, -5, 100, 130)) is None
    # backwards timestamp
    assert tr.on_sample(sample(Phase.MOVE, 100, 150, 50)) is None
    # a malformed DOWN does not move the anchor
    assert tr.on_sample(sample(Phase.DOWN, math.nan, 0, 140)) is None

    d = tr.on_sample(sample(Phase.MOVE, 100, 150, 150))
    assert (d.anchor_x, d.anchor_y) == (100, 100)
    assert d.dy == 50
