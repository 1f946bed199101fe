"""Demo: a greeting whose content, layout and colors are all tweakable.

Run in a notebook::

    from tweakable.demo import demo
    demo()
"""

from __future__ import annotations

from typing import Any

from .editors import Color, choice_editor
from .overlay import TweakableOverlay
from .tree import Tweakable, View

ALIGNMENTS = {"leading": "left", "center": "center", "trailing": "right"}


def _wrap(inner: str, **style: Any) -> str:
    css = ";".join(f"{name.replace('_', '-')}:{value}" for name, value in style.items())
    return f"<div style='{css}'>{inner}</div>"


def content_view() -> View:
    """Build the demo tree. Every call yields the same site keys."""
    # One declaration per statement: the site key is the calling line.
    view = Tweakable("Content", True, lambda show: "Hello, world!" if show else "&#127760;")
    view = view.tweakable(
        "alignment",
        "center",
        lambda out, align: _wrap(out, width="100%", text_align=ALIGNMENTS[align]),
        editor=choice_editor(list(ALIGNMENTS)),
    )
    view = view.tweakable("padding", 10.0, lambda out, pad: _wrap(out, padding=f"{pad:g}px"))
    view = view.tweakable("offset", 10.0, lambda out, dx: _wrap(out, position="relative", left=f"{dx:g}px"))
    view = view.tweakable("foreground color", Color("white"), lambda out, color: _wrap(out, color=color))
    view = view.tweakable("background", Color("blue"), lambda out, color: _wrap(out, background=color))
    return view


def demo() -> TweakableOverlay:
    """Return an overlay hosting :func:`content_view`."""
    return TweakableOverlay(content_view())
