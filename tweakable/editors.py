"""Editor widgets for tweakable values.

Every editor is a callable ``editor(label, cell) -> widget``. The widget shows
``cell.value`` when built, writes edits back through ``cell.value = ...`` and
follows later changes pushed by the root (for example a reset).

Editors are looked up by value type when a declaration does not name one::

    bool   -> Checkbox
    int    -> IntSlider + expression field
    float  -> FloatSlider + expression field (0..300)
    Color  -> ColorPicker
    str    -> Text

Use :func:`register_editor` to add types.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Optional, Sequence

import ipywidgets as widgets
import traitlets

from .input_convert import input_convert

logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())

Editor = Callable[[str, Any], Any]

DEFAULT_MIN = 0.0
DEFAULT_MAX = 300.0


class Color(str):
    """CSS color (``"white"``, ``"#3366ff"``) edited with a color picker."""

    __slots__ = ()

    def __repr__(self) -> str:
        return f"Color({str.__repr__(self)})"


# SECTION: registry [id: registry]
# =============================================================================

_EDITORS: Dict[type, Editor] = {}


def register_editor(value_type: type, editor: Editor) -> Editor:
    """Make ``editor`` the default for values of ``value_type`` (and subclasses).

    Returns
    -------
    callable
        ``editor``, unchanged.
    """
    if not isinstance(value_type, type):
        raise TypeError(f"value_type must be a type, got {value_type!r}.")
    _EDITORS[value_type] = editor
    return editor


def editor_for(value: Any) -> Editor:
    """Return the registered editor for ``type(value)``.

    The most specific registered base class wins, so ``True`` gets the bool
    editor even though ``bool`` subclasses ``int``.

    Raises
    ------
    LookupError
        If no editor is registered for the value's type or its bases.
    """
    for klass in type(value).__mro__:
        editor = _EDITORS.get(klass)
        if editor is not None:
            return editor
    raise LookupError(
        f"No editor registered for {type(value).__name__}; pass editor=... explicitly."
    )


# SECTION: binding [id: binding]
# =============================================================================

def bind(widget: Any, cell: Any, convert: Optional[Callable[[Any], Any]] = None) -> Any:
    """Keep ``widget.value`` and ``cell.value`` in step.

    Widget changes are written to the cell (after ``convert``). Values pushed
    by the cell's owner are copied into the widget without echoing back.

    Returns
    -------
    Any
        ``widget``, for chaining.
    """
    state = {"syncing": False}

    def _on_widget(change: Any) -> None:
        if state["syncing"]:
            return
        new = change.new
        cell.value = convert(new) if convert is not None else new

    def _on_cell(value: Any) -> None:
        if widget.value == value:
            return
        state["syncing"] = True
        try:
            widget.value = value
        finally:
            state["syncing"] = False

    widget.observe(_on_widget, names="value")
    cell.watch(_on_cell)
    return widget


# SECTION: widgets [id: widgets]
# =============================================================================

class FloatEditor(widgets.HBox):
    """
    Slider with a single editable numeric field.

    The text field commits on Enter and accepts expressions (``pi*20``), which
    are parsed with :func:`~tweakable.input_convert.input_convert` and clamped
    to the slider range. Text that does not parse reverts to the last value.
    """

    value = traitlets.Float(0.0)
    _slider_class = widgets.FloatSlider
    _number_type: type = float

    def __init__(self, value=0.0, min=DEFAULT_MIN, max=DEFAULT_MAX, step=0.1, description="", **kwargs):
        # Internal guard to prevent slider -> text -> slider loops
        self._syncing = False

        self.description_label = widgets.Label(description, layout=widgets.Layout(width="120px"))
        self.slider = self._slider_class(
            value=value,
            min=min,
            max=max,
            step=step,
            description="",
            continuous_update=True,
            readout=False,
            layout=widgets.Layout(width="50%"),
        )
        self.number = widgets.Text(
            value=self._format(self.slider.value),
            continuous_update=False,
            layout=widgets.Layout(width="70px"),
        )
        super().__init__(
            [self.description_label, self.slider, self.number],
            layout=widgets.Layout(align_items="center"),
            **kwargs,
        )

        # The trait must match the slider before linking, since link copies
        # source -> target immediately.
        self.value = self.slider.value
        traitlets.link((self, "value"), (self.slider, "value"))
        self.slider.observe(self._sync_number_from_slider, names="value")
        self.number.observe(self._commit_text_value, names="value")

    def _format(self, val: Any) -> str:
        return f"{val:.4g}"

    def _sync_number_text(self, val: Any) -> None:
        self._syncing = True
        try:
            self.number.value = self._format(val)
        finally:
            self._syncing = False

    def _sync_number_from_slider(self, change) -> None:
        if self._syncing:
            return
        self._sync_number_text(change.new)

    def _commit_text_value(self, change) -> None:
        if self._syncing:
            return
        raw = (change.new or "").strip()
        old_val = self.value
        try:
            new_val = input_convert(raw, dest_type=self._number_type)
        except ValueError:
            logger.debug("rejected numeric input %r", raw)
            self._sync_number_text(old_val)
            return
        self.value = self._number_type(max(self.slider.min, min(new_val, self.slider.max)))
        self._sync_number_text(self.value)


class IntEditor(FloatEditor):
    """Integer variant of :class:`FloatEditor`."""

    value = traitlets.Int(0)
    _slider_class = widgets.IntSlider
    _number_type = int

    def _format(self, val: Any) -> str:
        return str(int(val))


def number_editor(min_value: float = DEFAULT_MIN, max_value: float = DEFAULT_MAX, step: Optional[float] = None) -> Editor:
    """Return a numeric editor with a custom range.

    The editor follows the cell's type: ``int`` cells get an integer slider.
    The range is widened to include the current value so it is never clamped
    on display.
    """

    def editor(label: str, cell: Any) -> Any:
        current = cell.value
        if isinstance(current, int) and not isinstance(current, bool):
            widget = IntEditor(
                value=current,
                min=int(min(min_value, current)),
                max=int(max(max_value, current)),
                step=int(step or 1),
                description=label,
            )
        else:
            widget = FloatEditor(
                value=float(current),
                min=float(min(min_value, current)),
                max=float(max(max_value, current)),
                step=float(step or 0.1),
                description=label,
            )
        return bind(widget, cell)

    return editor


def bool_editor(label: str, cell: Any) -> Any:
    return bind(widgets.Checkbox(value=cell.value, description=label, indent=False), cell)


def color_editor(label: str, cell: Any) -> Any:
    picker = widgets.ColorPicker(value=str(cell.value), description=label, concise=False)
    return bind(picker, cell, convert=Color)


def text_editor(label: str, cell: Any) -> Any:
    return bind(widgets.Text(value=cell.value, description=label, continuous_update=False), cell)


def choice_editor(options: Sequence[Any]) -> Editor:
    """Return an editor that picks one of ``options`` with toggle buttons."""
    options = list(options)
    if not options:
        raise ValueError("choice_editor needs at least one option.")

    def editor(label: str, cell: Any) -> Any:
        buttons = widgets.ToggleButtons(options=options, value=cell.value, description=label)
        return bind(buttons, cell)

    return editor


register_editor(bool, bool_editor)
register_editor(int, number_editor())
register_editor(float, number_editor())
register_editor(Color, color_editor)
register_editor(str, text_editor)
