from __future__ import annotations

import threading
from typing import Callable, Dict

from PIL import Image, ImageDraw

from mousetotouch.core.control import ModeController
from mousetotouch.core.types import ModeState


_REFRESH_S = 0.25

_icons: Dict[ModeState, Image.Image] = {}


def state_icon(state: ModeState) -> Image.Image:
    """Two fingertips; filled while gestures are translated, outlined when idle."""
    if state not in _icons:
        img = Image.new("RGBA", (64, 64), (0, 0, 0, 0))
        d = ImageDraw.Draw(img)
        fill = (255, 255, 255, 255) if state == ModeState.ACTIVE else None
        for box in ((12, 20, 30, 44), (34, 20, 52, 44)):
            d.ellipse(box, outline=(255, 255, 255, 230), width=3, fill=fill)
        _icons[state] = img
    return _icons[state]


def toggle_label(state: ModeState) -> str:
    return "Stop" if state == ModeState.ACTIVE else "Mode"


def tray_title(state: ModeState) -> str:
    return f"MouseToTouch ({'ON' if state == ModeState.ACTIVE else 'OFF'})"


def run_tray(control: ModeController, stop_flag: threading.Event, rotate: Callable[[], None]) -> None:
    try:
        import pystray
    except Exception as e:
        # no tray backend on this desktop: hotkeys only
        print(f"[MouseToTouch] Tray unavailable: {e}. Hotkeys only.")
        return

    def refresh(icon) -> None:
        state = control.state
        icon.icon = state_icon(state)
        icon.title = tray_title(state)
        icon.update_menu()

    def act(fn):
        # menu callbacks get (icon, item)
        return lambda icon, _item: (fn(), refresh(icon))

    def quit_app(icon, _item) -> None:
        stop_flag.set()
        icon.stop()

    menu = pystray.Menu(
        pystray.MenuItem(lambda _item: toggle_label(control.state), act(control.toggle), default=True),
        pystray.MenuItem("Emergency stop", act(control.emergency_stop)),
        pystray.MenuItem("Rotate screen", act(rotate)),
        pystray.Menu.SEPARATOR,
        pystray.MenuItem("Quit", quit_app),
    )
    icon = pystray.Icon("MouseToTouch", state_icon(control.state), tray_title(control.state), menu)

    def follow_hotkeys(icon) -> None:
        # hotkeys change the mode behind the tray's back
        icon.visible = True
        shown = control.state
        while not stop_flag.wait(_REFRESH_S):
            if control.state != shown:
                shown = control.state
                refresh(icon)

    try:
        icon.run(setup=follow_hotkeys)
    except Exception as e:
        # tray backends are fragile: hotkeys stay alive without it
        print(f"[MouseToTouch] Tray backend crashed: {e}")
