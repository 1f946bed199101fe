"""Top-level public API for the ``tweakable`` package.

Declare tweakable values anywhere in a view tree and get an editor panel for
them without keeping a registry:

>>> from tweakable import Tweakable, TweakableOverlay  # doctest: +SKIP
>>> view = Tweakable("padding", 10, lambda p: f"<div style='padding:{p}px'>Hi</div>")  # doctest: +SKIP
>>> TweakableOverlay(view)  # doctest: +SKIP

Each declaration is identified by the source position that created it. The
root collects every declaration's editor once per pass and broadcasts the
edited values back down on the next pass.
"""

from .cell import Cell, CellView, TypedCell, value_matches
from .config import TweakableConfig
from .context import Collector, RenderContext, current_context, tweak
from .descriptor import EditorDescriptor
from .editors import (
    Color,
    FloatEditor,
    IntEditor,
    bind,
    bool_editor,
    choice_editor,
    color_editor,
    editor_for,
    number_editor,
    register_editor,
    text_editor,
)
from .errors import SiteCollisionError, TweakableError, TweakableTypeError
from .events import TweakEvent
from .input_convert import input_convert
from .overlay import TweakableOverlay
from .root import RootState, TweakableRoot
from .site_key import SiteKey, check_unique_sites
from .snapshot import TweakSnapshot
from .tables import DefinitionTable, ValueTable
from .tree import Component, Group, Modified, Static, Tweakable, View, component

__all__ = [
    "Cell",
    "CellView",
    "TypedCell",
    "value_matches",
    "TweakableConfig",
    "Collector",
    "RenderContext",
    "current_context",
    "tweak",
    "EditorDescriptor",
    "Color",
    "FloatEditor",
    "IntEditor",
    "bind",
    "bool_editor",
    "choice_editor",
    "color_editor",
    "editor_for",
    "number_editor",
    "register_editor",
    "text_editor",
    "SiteCollisionError",
    "TweakableError",
    "TweakableTypeError",
    "TweakEvent",
    "input_convert",
    "TweakableOverlay",
    "RootState",
    "TweakableRoot",
    "SiteKey",
    "check_unique_sites",
    "TweakSnapshot",
    "DefinitionTable",
    "ValueTable",
    "Component",
    "Group",
    "Modified",
    "Static",
    "Tweakable",
    "View",
    "component",
]
