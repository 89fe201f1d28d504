import pytest

from mousetotouch.core.types import GestureRequest, IntentKind, StrokePath
from mousetotouch.injector.playback import RecordingExecutor, touch_frames


def test_single_stroke_frames():
    req = GestureRequest(kind=IntentKind.SCROLL, strokes=(
        StrokePath(points=((100, 100), (100, 140)), duration_ms=50),
    ))
    frames = touch_frames(req, frame_ms=10)

    assert [t for t, _ in frames] == [0, 10, 20, 30, 40, 50]
    assert frames[0][1] == {0: (100, 100)}
    assert frames[-1][1] == {0: (100, 140)}
    ys = [c[0][1] for _, c in frames]
    assert ys == sorted(ys)


def test_pinch_fingers_are_down_together():
    req = GestureRequest(kind=IntentKind.ZOOM, strokes=(
        StrokePath(points=((500, 850), (500, 450)), duration_ms=200),
        StrokePath(points=((500, 1150), (500, 1550)), duration_ms=200),
    ))
    frames = touch_frames(req, frame_ms=8)

    assert frames[-1][0] == 200
    # every frame carries both contacts: one two-finger gesture, not two drags
    assert all(set(c) == {0, 1} for _, c in frames)
    assert frames[-1][1] == {0: (500, 450), 1: (500, 1550)}


def test_uneven_frame_interval_still_hits_the_end():
    req = GestureRequest(kind=IntentKind.SCROLL, strokes=(
        StrokePath(points=((0, 0), (30, 0)), duration_ms=25),
    ))
    frames = touch_frames(req, frame_ms=8)
    assert [t for t, _ in frames] == [0, 8, 16, 24, 25]
    assert frames[-1][1][0] == (30, 0)


def test_staggered_strokes():
    req = GestureRequest(kind=IntentKind.ZOOM, strokes=(
        StrokePath(points=((0, 0), (10, 0)), duration_ms=20),
        StrokePath(points=((0, 50), (10, 50)), duration_ms=20, start_ms=20),
    ))
    frames = dict(touch_frames(req, frame_ms=10))
    assert set(frames[0]) == {0}
    assert set(frames[20]) == {0, 1}
    assert set(frames[40]) == {1}


def test_bad_frame_interval():
    req = GestureRequest(kind=IntentKind.SCROLL, strokes=(
        StrokePath(points=((0, 0), (10, 0)), duration_ms=20),
    ))
    with pytest.raises(ValueError):
        touch_frames(req, frame_ms=0)


def test_recording_executor_keeps_order():
    ex = RecordingExecutor()
    reqs = [
        GestureRequest(kind=IntentKind.SCROLL, strokes=(StrokePath(points=((0, 0), (0, i)), duration_ms=50),))
        for i in (10, 20, 30)
    ]
    for r in reqs:
        ex.dispatch(r)
    assert ex.requests == reqs
