"""Configuration for roots and overlays."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

CollisionPolicy = Literal["replace", "warn", "raise"]
COLLISION_POLICIES = ("replace", "warn", "raise")


@dataclass(frozen=True)
class TweakableConfig:
    """Options shared by :class:`TweakableRoot` and :class:`TweakableOverlay`.

    Parameters
    ----------
    collision_policy : {"replace", "warn", "raise"}, default="replace"
        What happens when two emissions of one pass share a site key.
        ``"replace"`` keeps the later one (last writer wins), ``"warn"`` does
        the same but emits a warning, ``"raise"`` fails the pass with
        :class:`~tweakable.errors.SiteCollisionError`.
    panel_max_height : str, default="200px"
        CSS max height of the editor panel. Longer panels scroll.
    show_captions : bool, default=True
        Show the ``file:line`` caption under each editor.
    """

    collision_policy: CollisionPolicy = "replace"
    panel_max_height: str = "200px"
    show_captions: bool = True

    def __post_init__(self) -> None:
        if self.collision_policy not in COLLISION_POLICIES:
            options = ", ".join(COLLISION_POLICIES)
            raise ValueError(
                f"Unknown collision_policy {self.collision_policy!r}; expected one of {options}."
            )


DEFAULT_CONFIG = TweakableConfig()
