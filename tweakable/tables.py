"""Definition and value tables owned by a collection root.

Both tables are immutable mappings. The root replaces them wholesale after
each pass, so a snapshot handed to the tree can never change under a reader.
"""

from __future__ import annotations

import logging
import warnings
from collections.abc import Iterator, Mapping
from typing import Any, Dict, Iterable, List, Optional, Tuple

from .cell import value_matches
from .config import CollisionPolicy
from .descriptor import EditorDescriptor
from .errors import SiteCollisionError
from .site_key import SiteKey

logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())


class DefinitionTable(Mapping[SiteKey, EditorDescriptor]):
    """Immutable ``SiteKey -> EditorDescriptor`` mapping merged from emissions.

    Tables form a monoid under :meth:`merge`: :data:`EMPTY_DEFINITIONS` is the
    identity and merging is associative, so the result of a pass does not
    depend on how the tree groups its subtrees.

    Parameters
    ----------
    entries : Mapping[SiteKey, EditorDescriptor], optional
        Initial entries, copied.
    """

    __slots__ = ("_entries",)

    def __init__(self, entries: Optional[Mapping[SiteKey, EditorDescriptor]] = None) -> None:
        self._entries: Dict[SiteKey, EditorDescriptor] = dict(entries or {})

    @classmethod
    def singleton(cls, key: SiteKey, descriptor: EditorDescriptor) -> "DefinitionTable":
        """Return the one-entry table a single annotation node emits."""
        return cls({key: descriptor})

    def merge(self, other: Mapping[SiteKey, EditorDescriptor], policy: CollisionPolicy = "replace") -> "DefinitionTable":
        """Return ``self`` followed by ``other``.

        On a shared key the entry from ``other`` wins unless ``policy`` is
        ``"raise"``.

        Raises
        ------
        SiteCollisionError
            If ``policy == "raise"`` and a key appears on both sides.
        """
        if not other:
            return self
        if not self._entries and isinstance(other, DefinitionTable):
            return other
        merged = dict(self._entries)
        for key, descriptor in other.items():
            if key in merged:
                _report_collision(key, policy)
            merged[key] = descriptor
        return DefinitionTable(merged)

    @classmethod
    def reduce(cls, tables: Iterable[Mapping[SiteKey, EditorDescriptor]], policy: CollisionPolicy = "replace") -> "DefinitionTable":
        """Left-fold ``tables`` with :meth:`merge`, starting from the empty table."""
        result = EMPTY_DEFINITIONS
        for table in tables:
            result = result.merge(table, policy)
        return result

    def sorted_items(self) -> List[Tuple[SiteKey, EditorDescriptor]]:
        """Return entries in display order (ascending site key)."""
        return sorted(self._entries.items(), key=lambda item: item[0])

    def __getitem__(self, key: SiteKey) -> EditorDescriptor:
        return self._entries[key]

    def __iter__(self) -> Iterator[SiteKey]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        labels = ", ".join(f"{key.caption}={desc.label!r}" for key, desc in self._entries.items())
        return f"DefinitionTable({labels})"


def _report_collision(key: SiteKey, policy: CollisionPolicy) -> None:
    if policy == "raise":
        raise SiteCollisionError(key)
    if policy == "warn":
        warnings.warn(f"Site {key} was declared more than once in a single pass; keeping the last declaration.")
    else:
        logger.debug("site collision at %s, last declaration wins", key)


EMPTY_DEFINITIONS = DefinitionTable()


class ValueTable(Mapping[SiteKey, Any]):
    """Immutable ``SiteKey -> value`` snapshot broadcast to the tree.

    Parameters
    ----------
    values : Mapping[SiteKey, Any], optional
        Initial values, copied.
    """

    __slots__ = ("_values",)

    def __init__(self, values: Optional[Mapping[SiteKey, Any]] = None) -> None:
        self._values: Dict[SiteKey, Any] = dict(values or {})

    @classmethod
    def derive(cls, definitions: Mapping[SiteKey, EditorDescriptor], prior: Mapping[SiteKey, Any]) -> "ValueTable":
        """Build the value table that follows a settled pass.

        Keys still defined keep their prior value, new keys start at their
        descriptor's default, and keys no longer defined are dropped.

        Examples
        --------
        >>> a, b = SiteKey("f.py", 1, 1), SiteKey("f.py", 2, 1)
        >>> defs = DefinitionTable({a: EditorDescriptor(1, "a", int, None),
        ...                         b: EditorDescriptor(2, "b", int, None)})
        >>> dict(ValueTable.derive(defs, {a: 7, SiteKey("gone.py", 1, 1): 0})) == {a: 7, b: 2}
        True
        """
        return cls({
            key: prior[key] if key in prior else descriptor.default_value
            for key, descriptor in definitions.items()
        })

    def with_value(self, key: SiteKey, value: Any) -> "ValueTable":
        """Return a copy with ``key`` set to ``value``."""
        values = dict(self._values)
        values[key] = value
        return ValueTable(values)

    def resolve(self, key: SiteKey, default: Any) -> Any:
        """Return the stored value for ``key`` if it matches ``default``'s type.

        Missing keys and values of another type both fall back to ``default``.
        """
        if key in self._values:
            value = self._values[key]
            if value_matches(value, type(default)):
                return value
        return default

    def __getitem__(self, key: SiteKey) -> Any:
        return self._values[key]

    def __iter__(self) -> Iterator[SiteKey]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"ValueTable({self._values!r})"


EMPTY_VALUES = ValueTable()
