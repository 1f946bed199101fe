"""Collection root: owns the definition and value tables of one tree.

Each pass the root broadcasts its current :class:`ValueTable` down the tree,
waits for the fully merged :class:`DefinitionTable`, then derives the next
value table from it. Edits write the value table and trigger one more pass.

Logging
-------
This module uses the standard Python ``logging`` framework with a
``NullHandler``. Enable pass logs with::

    import logging
    logging.getLogger("tweakable.root").setLevel(logging.DEBUG)
"""

from __future__ import annotations

import enum
import logging
import warnings
from collections.abc import Hashable
from typing import Any, Callable, Dict, List, Optional, Tuple

from .cell import Cell, CellView, value_matches
from .config import DEFAULT_CONFIG, TweakableConfig
from .context import Collector, RenderContext, _use_context
from .descriptor import EditorDescriptor
from .errors import TweakableTypeError
from .events import TweakEvent
from .site_key import SiteKey
from .snapshot import TweakSnapshot
from .tables import EMPTY_DEFINITIONS, EMPTY_VALUES, DefinitionTable, ValueTable
from .tree import Component, View, render_output

# Module logger
# - Uses a NullHandler so importing this module never configures global logging.
# - Callers can enable logs via standard logging configuration.
logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())


def _same_editor(a: EditorDescriptor, b: EditorDescriptor) -> bool:
    """Whether a widget built for ``a`` can keep serving ``b``."""
    return a.label == b.label and a.value_type is b.value_type


class RootState(enum.Enum):
    IDLE = "idle"
    COLLECTING = "collecting"
    SETTLED = "settled"


class TweakableRoot:
    """Collection root for one tree of tweakable sites.

    Parameters
    ----------
    content : View or callable
        Tree to render every pass. A plain callable is wrapped in a
        :class:`~tweakable.tree.Component`.
    config : TweakableConfig, optional
        Collision policy and display options.

    Notes
    -----
    The root is single-threaded: passes run synchronously in the caller's
    thread. Edits that arrive while a pass is running are applied to the
    value table immediately but only observed by a follow-up pass; several
    such edits are coalesced into one follow-up pass.

    Examples
    --------
    >>> from tweakable.tree import Tweakable
    >>> root = TweakableRoot(Tweakable("padding", 10, lambda p: f"padding={p}"))  # doctest: +SKIP
    >>> root.render()  # doctest: +SKIP
    'padding=10'
    """

    def __init__(self, content: Any, config: Optional[TweakableConfig] = None) -> None:
        if not isinstance(content, View):
            if not callable(content):
                raise TypeError(f"content must be a View or a callable, got {type(content).__name__}.")
            content = Component(content)
        self._content = content
        self._config = config or DEFAULT_CONFIG
        self._state = RootState.IDLE
        self._definitions: DefinitionTable = EMPTY_DEFINITIONS
        self._values: ValueTable = EMPTY_VALUES
        self._output: Any = None
        self._pass_count = 0
        self._rerender = False
        self._pending_events: List[TweakEvent] = []
        self._cells: Dict[SiteKey, Cell] = {}
        self._editors: Dict[SiteKey, Tuple[EditorDescriptor, Any, CellView]] = {}
        self._hooks: Dict[Hashable, Callable[[TweakEvent], Any]] = {}
        self._hook_counter = 0
        self._settle_listeners: List[Callable[["TweakableRoot"], None]] = []

    # --- State ----------------------------------------------------------------

    @property
    def state(self) -> RootState:
        return self._state

    @property
    def config(self) -> TweakableConfig:
        return self._config

    @property
    def definitions(self) -> DefinitionTable:
        """Definitions of the last settled pass."""
        return self._definitions

    @property
    def values(self) -> ValueTable:
        """Current value table (includes edits not yet rendered)."""
        return self._values

    @property
    def output(self) -> Any:
        """Output of the last settled pass."""
        return self._output

    @property
    def pass_count(self) -> int:
        return self._pass_count

    # --- Passes ---------------------------------------------------------------

    def render(self, reason: str = "manual") -> Any:
        """Run a render pass and return its output.

        Called while a pass is already running (for example by an editor
        reacting to a value pushed during the pass), the request is coalesced
        into one follow-up pass.

        Parameters
        ----------
        reason : str, default="manual"
            Free-form reason used in logs.

        Returns
        -------
        Any
            Output of the settled pass.
        """
        if self._state is RootState.COLLECTING:
            self._rerender = True
            return self._output

        try:
            self._run_pass(reason)
            while self._rerender:
                self._rerender = False
                self._run_pass("coalesced")
        except BaseException:
            # Events of a failed render are never reported.
            self._pending_events = []
            raise

        events, self._pending_events = self._pending_events, []
        self._notify_settled()
        for event in events:
            self._run_hooks(event)
        return self._output

    def _run_pass(self, reason: str) -> None:
        previous_state = self._state
        self._state = RootState.COLLECTING
        collector = Collector(self._config.collision_policy)
        ctx = RenderContext(self._values, collector)
        try:
            with _use_context(ctx):
                output = render_output(self._content, ctx)
        except BaseException:
            collector.discard()
            self._state = previous_state
            self._rerender = False
            raise
        definitions = collector.close()

        self._definitions = definitions
        self._values = ValueTable.derive(definitions, self._values)
        self._output = output
        self._pass_count += 1
        self._state = RootState.SETTLED
        logger.debug("render(reason=%s) pass=%d sites=%d", reason, self._pass_count, len(definitions))

        for key in [key for key in self._editors if key not in self._values]:
            self._editors.pop(key)[2].close()
        for key in [key for key in self._cells if key not in self._values]:
            del self._cells[key]
        for cell in list(self._cells.values()):
            cell.refresh()

    def on_settle(self, callback: Callable[["TweakableRoot"], None]) -> None:
        """Call ``callback(root)`` after every settled :meth:`render`."""
        self._settle_listeners.append(callback)

    def _notify_settled(self) -> None:
        for callback in list(self._settle_listeners):
            callback(self)

    # --- Edits ----------------------------------------------------------------

    def edit(self, key: SiteKey, value: Any) -> bool:
        """Set the value of ``key`` and re-render.

        Parameters
        ----------
        key : SiteKey
            Target site.
        value : Any
            New value; must be an instance of the site's declared type.

        Returns
        -------
        bool
            ``False`` when ``key`` is not in the current value table (the
            site has unmounted or never rendered); the edit is dropped.

        Raises
        ------
        TweakableTypeError
            If ``value`` does not match the type the site was declared with.
        """
        if key not in self._values:
            logger.debug("dropping edit for stale site %s", key)
            return False
        descriptor = self._definitions.get(key)
        if descriptor is not None and not value_matches(value, descriptor.value_type):
            raise TweakableTypeError(descriptor.label, descriptor.value_type, value)
        old = self._values[key]
        self._values = self._values.with_value(key, value)
        label = descriptor.label if descriptor is not None else ""
        self._pending_events.append(TweakEvent(key=key, label=label, old=old, new=value, reason="edit"))
        self.render(reason="edit")
        return True

    def reset(self, key: Optional[SiteKey] = None) -> None:
        """Restore one site (or every site) to its declared default and re-render."""
        keys = [key] if key is not None else list(self._definitions)
        values = self._values
        for site in keys:
            descriptor = self._definitions.get(site)
            if descriptor is None or site not in values:
                continue
            old = values[site]
            values = values.with_value(site, descriptor.default_value)
            self._pending_events.append(
                TweakEvent(key=site, label=descriptor.label, old=old, new=descriptor.default_value, reason="reset")
            )
        self._values = values
        self.render(reason="reset")

    def cell(self, key: SiteKey) -> Optional[Cell]:
        """Return a read-write cell for ``key``, or ``None`` for a stale key.

        Writing a cell dispatches :meth:`edit`; once its site unmounts, writes
        are dropped and reads return the site's declared default.
        """
        cell = self._cells.get(key)
        if cell is not None:
            return cell
        if key not in self._values:
            return None
        descriptor = self._definitions.get(key)
        fallback = descriptor.default_value if descriptor is not None else self._values[key]

        def _get() -> Any:
            return self._values[key] if key in self._values else fallback

        def _set(v: Any) -> None:
            self.edit(key, v)

        cell = Cell(_get, _set)
        self._cells[key] = cell
        return cell

    # --- Overlay support ------------------------------------------------------

    def editor_entries(self) -> List[Tuple[SiteKey, EditorDescriptor]]:
        """Definitions in display order (ascending site key)."""
        return self._definitions.sorted_items()

    def open_cell(self, key: SiteKey) -> Optional[CellView]:
        """Return a fresh :class:`~tweakable.cell.CellView` on :meth:`cell`.

        Closing the view detaches every watcher registered through it.
        """
        cell = self.cell(key)
        return CellView(cell) if cell is not None else None

    def editors(self) -> List[Tuple[SiteKey, Any]]:
        """Return one editor widget per site, in display order.

        Widgets are built on first request and reused while the site keeps
        its label and type. Sites whose cell cannot be created are skipped.
        """
        built = []
        for key, descriptor in self.editor_entries():
            cached = self._editors.get(key)
            if cached is not None and _same_editor(cached[0], descriptor):
                built.append((key, cached[1]))
                continue
            view = self.open_cell(key)
            if view is None:
                continue
            if cached is not None:
                cached[2].close()
            widget = descriptor.render(descriptor.label, view)
            self._editors[key] = (descriptor, widget, view)
            built.append((key, widget))
        return built

    def snapshot(self) -> TweakSnapshot:
        """Return an immutable snapshot of labels, values and defaults."""
        return TweakSnapshot({
            key: {
                "label": descriptor.label,
                "value": self._values.get(key, descriptor.default_value),
                "default": descriptor.default_value,
                "caption": key.caption,
            }
            for key, descriptor in self._definitions.items()
        })

    # --- Hooks ----------------------------------------------------------------

    def add_hook(self, callback: Callable[[TweakEvent], Any], hook_id: Optional[Hashable] = None) -> Hashable:
        """Register ``callback(event)`` to run after each edit has been rendered.

        Parameters
        ----------
        callback : callable
            Receives a :class:`~tweakable.events.TweakEvent`.
        hook_id : hashable, optional
            Identifier; registering the same id again replaces the callback.
            Auto ids are ``"hook:1"``, ``"hook:2"``, ...

        Returns
        -------
        Hashable
            The hook id.

        Raises
        ------
        TypeError
            If ``hook_id`` is not hashable.
        """
        if hook_id is None:
            self._hook_counter += 1
            hook_id = f"hook:{self._hook_counter}"
            while hook_id in self._hooks:
                self._hook_counter += 1
                hook_id = f"hook:{self._hook_counter}"
        else:
            hash(hook_id)
            if isinstance(hook_id, str) and hook_id.startswith("hook:"):
                suffix = hook_id[len("hook:"):]
                if suffix.isdigit():
                    self._hook_counter = max(self._hook_counter, int(suffix))
        self._hooks[hook_id] = callback
        return hook_id

    def remove_hook(self, hook_id: Hashable) -> None:
        self._hooks.pop(hook_id, None)

    def get_hooks(self) -> Dict[Hashable, Callable[[TweakEvent], Any]]:
        """Return a shallow copy of the registered hooks."""
        return self._hooks.copy()

    def _run_hooks(self, event: TweakEvent) -> None:
        for hook_id, callback in list(self._hooks.items()):
            try:
                callback(event)
            except Exception as exc:
                warnings.warn(f"Hook {hook_id} failed: {exc}")
