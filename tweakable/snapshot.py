"""Immutable snapshots of a root's tweakable state.

A snapshot captures a deep-copied mapping of ``SiteKey -> metadata`` so code
can inspect or log the tweaked values without holding on to live tables.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from copy import deepcopy
from types import MappingProxyType
from typing import Any, Dict

from .site_key import SiteKey


def _resolve_key(keys: Mapping[SiteKey, Mapping[str, Any]], key: SiteKey | str) -> SiteKey:
    """Resolve site-key-or-label lookups to a concrete key or raise KeyError."""
    if isinstance(key, SiteKey):
        return key
    if isinstance(key, str):
        matches = [site for site, entry in keys.items() if entry["label"] == key]
        if len(matches) == 1:
            return matches[0]
        if len(matches) > 1:
            options = ", ".join(site.caption for site in matches)
            raise KeyError(
                f"Ambiguous label {key!r}; declared at: {options}. "
                "Use a SiteKey for explicit access."
            )
        raise KeyError(f"Unknown label {key!r}.")
    raise KeyError(f"Unsupported key type {type(key).__name__}; use SiteKey or str.")


class TweakSnapshot(Mapping[SiteKey, Mapping[str, Any]]):
    """Immutable snapshot of tweak values and metadata, ordered by site key.

    Each entry holds ``label``, ``value``, ``default`` and ``caption``. Lookup
    accepts a :class:`SiteKey` or an unambiguous label.

    Parameters
    ----------
    entries : Mapping[SiteKey, Mapping[str, Any]]
        Source entries; copied deeply and sorted by key.

    Examples
    --------
    >>> key = SiteKey("demo.py", 4, 9)
    >>> snap = TweakSnapshot({key: {"label": "padding", "value": 20, "default": 10, "caption": "demo.py:4"}})
    >>> snap.value_map()["padding"]
    20
    """

    def __init__(self, entries: Mapping[SiteKey, Mapping[str, Any]]) -> None:
        self._entries: Dict[SiteKey, Dict[str, Any]] = {
            key: deepcopy(dict(entries[key])) for key in sorted(entries)
        }

    def __getitem__(self, key: SiteKey | str) -> Mapping[str, Any]:
        """Return read-only metadata for a site key or unambiguous label."""
        site = _resolve_key(self._entries, key)
        return MappingProxyType(deepcopy(self._entries[site]))

    def __iter__(self) -> Iterator[SiteKey]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def value_map(self) -> "TweakValueSnapshot":
        """Return an immutable ``SiteKey -> value`` view with label lookup."""
        return TweakValueSnapshot(self._entries)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Mapping):
            return NotImplemented
        return list(self.items()) == list(other.items())

    def __repr__(self) -> str:
        return f"TweakSnapshot({self._entries!r})"


class TweakValueSnapshot(Mapping[SiteKey, Any]):
    """Immutable site-keyed values with unambiguous label lookup."""

    def __init__(self, entries: Mapping[SiteKey, Mapping[str, Any]]) -> None:
        self._entries = {key: {"label": entry["label"]} for key, entry in entries.items()}
        self._values: Dict[SiteKey, Any] = {
            key: deepcopy(entry["value"]) for key, entry in entries.items()
        }

    def __getitem__(self, key: SiteKey | str) -> Any:
        site = _resolve_key(self._entries, key)
        return deepcopy(self._values[site])

    def __iter__(self) -> Iterator[SiteKey]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"TweakValueSnapshot({self._values!r})"
