"""Standardized edit event payloads.

This module defines ``TweakEvent``, the immutable structure passed to hooks
registered with :meth:`TweakableRoot.add_hook`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .site_key import SiteKey


@dataclass(frozen=True)
class TweakEvent:
    """Normalized value change emitted after an edit has been rendered.

    Parameters
    ----------
    key : SiteKey
        The site whose value changed.
    label : str
        Label of the site's editor.
    old : Any
        Value before the edit.
    new : Any
        Value after the edit.
    reason : str
        ``"edit"`` for editor writes, ``"reset"`` for resets.

    Examples
    --------
    >>> key = SiteKey("demo.py", 3, 5)
    >>> TweakEvent(key=key, label="padding", old=10, new=20, reason="edit").new
    20
    """

    key: SiteKey
    label: str
    old: Any
    new: Any
    reason: str = "edit"
