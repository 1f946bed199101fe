"""Pass-scoped render context and the ambient context stack.

A :class:`RenderContext` carries the two channels of one render pass:

- downward, the :class:`~tweakable.tables.ValueTable` snapshot every node reads;
- upward, a :class:`Collector` that every annotation emits its descriptor into.

The root threads the context explicitly through the tree. The most recently
entered context is also kept on a thread-local stack so function components
can call :func:`tweak` without receiving it as an argument.
"""

from __future__ import annotations

import threading
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any, Callable, List, Optional

from .config import CollisionPolicy
from .descriptor import EditorDescriptor
from .editors import editor_for
from .site_key import SiteKey
from .tables import EMPTY_DEFINITIONS, EMPTY_VALUES, DefinitionTable, ValueTable

_CONTEXT_STACK_LOCAL = threading.local()


class Collector:
    """Aggregation sink for one pass (or one subtree of a pass).

    Emissions are merged in arrival order. Subtrees get their own collector
    through :meth:`scope`; a child is merged into its parent only when the
    subtree finishes without raising.

    Parameters
    ----------
    policy : {"replace", "warn", "raise"}, default="replace"
        Collision policy applied to every merge.
    """

    def __init__(self, policy: CollisionPolicy = "replace") -> None:
        self._policy = policy
        self._table: DefinitionTable = EMPTY_DEFINITIONS
        self._closed = False

    @property
    def policy(self) -> CollisionPolicy:
        return self._policy

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def table(self) -> DefinitionTable:
        """Definitions merged so far."""
        return self._table

    def _require_open(self) -> None:
        if self._closed:
            raise RuntimeError("Collector is closed; emissions must happen during the pass.")

    def emit(self, key: SiteKey, descriptor: EditorDescriptor) -> None:
        """Merge a single annotation's descriptor."""
        self._require_open()
        self._table = self._table.merge(DefinitionTable.singleton(key, descriptor), self._policy)

    def absorb(self, table: DefinitionTable) -> None:
        """Merge a finished subtree's table after everything emitted so far."""
        self._require_open()
        self._table = self._table.merge(table, self._policy)

    @contextmanager
    def scope(self) -> Iterator["Collector"]:
        """Open a child collector for one subtree.

        The child is absorbed on normal exit and discarded if the block raises.
        """
        self._require_open()
        child = Collector(self._policy)
        try:
            yield child
        except BaseException:
            child.discard()
            raise
        self.absorb(child.close())

    def close(self) -> DefinitionTable:
        """Stop accepting emissions and return the merged table."""
        self._closed = True
        return self._table

    def discard(self) -> None:
        """Drop everything collected so far and stop accepting emissions."""
        self._table = EMPTY_DEFINITIONS
        self._closed = True


class RenderContext:
    """Read-only value snapshot plus write-only emission access for one pass.

    Parameters
    ----------
    values : ValueTable, optional
        Snapshot broadcast by the root. Defaults to the empty table.
    collector : Collector, optional
        Sink for emitted descriptors. Defaults to a fresh collector.
    """

    def __init__(self, values: ValueTable = EMPTY_VALUES, collector: Optional[Collector] = None) -> None:
        self._values = values
        self._collector = collector if collector is not None else Collector()

    @property
    def values(self) -> ValueTable:
        return self._values

    @property
    def collector(self) -> Collector:
        return self._collector

    def read(self, key: SiteKey, default: Any) -> Any:
        """Return the broadcast value for ``key``, or ``default``."""
        return self._values.resolve(key, default)

    def emit(self, key: SiteKey, descriptor: EditorDescriptor) -> None:
        self._collector.emit(key, descriptor)

    def annotate(self, key: SiteKey, label: str, default: Any, editor: Callable[[str, Any], Any]) -> Any:
        """Resolve the value of one site and emit its descriptor.

        Returns
        -------
        Any
            The value the site should render with for this pass.
        """
        value = self.read(key, default)
        self.emit(key, EditorDescriptor.create(default, label, editor))
        return value

    @contextmanager
    def scope(self) -> Iterator["RenderContext"]:
        """Enter a subtree: same value snapshot, child collector, ambient push."""
        with self._collector.scope() as child_collector:
            child = RenderContext(self._values, child_collector)
            with _use_context(child):
                yield child


def _context_stack() -> List[RenderContext]:
    """Return a thread-local context stack."""
    stack = getattr(_CONTEXT_STACK_LOCAL, "stack", None)
    if stack is None:
        stack = []
        _CONTEXT_STACK_LOCAL.stack = stack
    return stack


def current_context() -> Optional[RenderContext]:
    """Return the innermost active context, or ``None`` outside any pass."""
    stack = _context_stack()
    if not stack:
        return None
    return stack[-1]


def _pop_context(ctx: RenderContext) -> None:
    # Contexts are only pushed by _use_context, so they leave in LIFO order.
    stack = _context_stack()
    if stack and stack[-1] is ctx:
        stack.pop()


@contextmanager
def _use_context(ctx: RenderContext) -> Iterator[RenderContext]:
    """Temporarily make ``ctx`` the ambient context."""
    _context_stack().append(ctx)
    try:
        yield ctx
    finally:
        _pop_context(ctx)


def detached_context() -> RenderContext:
    """Context used when no root is rendering.

    Every read falls back to the site's default and emissions go nowhere.
    """
    return RenderContext(EMPTY_VALUES, Collector())


def tweak(
    label: str,
    default: Any,
    editor: Optional[Callable[[str, Any], Any]] = None,
    *,
    key: Optional[SiteKey] = None,
    stacklevel: int = 1,
) -> Any:
    """Declare a tweakable value inline and return its current value.

    Parameters
    ----------
    label : str
        Editor label.
    default : Any
        Value used until edited. Its type selects the default editor.
    editor : callable, optional
        ``editor(label, cell) -> widget``. Looked up from ``type(default)``
        when omitted.
    key : SiteKey, optional
        Explicit site key. Derived from the calling line when omitted.
    stacklevel : int, default=1
        Frames to skip when deriving the key; wrappers pass ``2`` or more.

    Examples
    --------
    >>> from tweakable.tree import component
    >>> @component  # doctest: +SKIP
    ... def title():
    ...     size = tweak("font size", 14)
    ...     return f"<h1 style='font-size:{size}px'>Hi</h1>"
    """
    if key is None:
        key = SiteKey.from_caller(stacklevel + 1)
    if editor is None:
        editor = editor_for(default)
    ctx = current_context()
    if ctx is None:
        ctx = detached_context()
    return ctx.annotate(key, label, default, editor)
