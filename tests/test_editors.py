from __future__ import annotations

import ipywidgets as widgets
import pytest

from tweakable.cell import Cell, TypedCell
from tweakable.editors import (
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
from tweakable.input_convert import input_convert


def _boxed(value, value_type=None):
    box = {"v": value}
    cell = Cell(lambda: box["v"], lambda v: box.__setitem__("v", v))
    return box, TypedCell(cell, value_type or type(value), "test")


def test_editor_for_picks_most_specific_registered_type() -> None:
    assert editor_for(True) is bool_editor
    assert editor_for(Color("red")) is color_editor
    assert editor_for("label") is text_editor
    assert editor_for(1) is not bool_editor


def test_editor_for_unknown_type_raises_lookup_error() -> None:
    class Alignment:
        pass

    with pytest.raises(LookupError, match="Alignment"):
        editor_for(Alignment())


def test_register_editor_extends_lookup() -> None:
    class Alignment(tuple):
        pass

    editor = choice_editor(["left", "right"])
    register_editor(Alignment, editor)

    assert editor_for(Alignment()) is editor


def test_bool_editor_writes_back_through_cell() -> None:
    box, cell = _boxed(True)

    checkbox = bool_editor("Content", cell)
    checkbox.value = False

    assert isinstance(checkbox, widgets.Checkbox)
    assert checkbox.description == "Content"
    assert box["v"] is False


def test_color_editor_writes_color_instances() -> None:
    box, cell = _boxed(Color("white"))

    picker = color_editor("foreground", cell)
    picker.value = "#ff0000"

    assert isinstance(box["v"], Color)
    assert box["v"] == "#ff0000"


def test_choice_editor_uses_toggle_buttons() -> None:
    box, cell = _boxed("center")

    buttons = choice_editor(["leading", "center", "trailing"])("alignment", cell)
    buttons.value = "trailing"

    assert isinstance(buttons, widgets.ToggleButtons)
    assert box["v"] == "trailing"


def test_choice_editor_needs_options() -> None:
    with pytest.raises(ValueError):
        choice_editor([])


def test_number_editor_follows_cell_type() -> None:
    _, int_cell = _boxed(10)
    _, float_cell = _boxed(10.0)

    assert isinstance(number_editor()("padding", int_cell), IntEditor)
    float_widget = number_editor()("offset", float_cell)
    assert isinstance(float_widget, FloatEditor)
    assert not isinstance(float_widget, IntEditor)


def test_number_editor_widens_range_to_fit_value() -> None:
    _, cell = _boxed(500.0)

    widget = number_editor(0.0, 300.0)("offset", cell)

    assert widget.value == 500.0
    assert widget.slider.max == 500.0


def test_bound_widget_follows_cell_refresh_without_echo() -> None:
    writes = []
    box = {"v": 1.0}
    cell = Cell(lambda: box["v"], lambda v: writes.append(v))
    widget = bind(widgets.FloatText(value=1.0), cell)

    box["v"] = 7.5
    cell.refresh()

    assert widget.value == 7.5
    assert writes == []


def test_float_editor_text_accepts_expressions_and_clamps() -> None:
    editor = FloatEditor(value=1.0, min=0.0, max=10.0, description="gain")

    editor.number.value = "pi"
    assert editor.value == pytest.approx(3.14159265)
    assert editor.slider.value == pytest.approx(3.14159265)

    editor.number.value = "100"
    assert editor.value == 10.0
    assert editor.number.value == "10"


def test_float_editor_reverts_unparseable_text() -> None:
    editor = FloatEditor(value=2.5, min=0.0, max=10.0)

    editor.number.value = "not a number("

    assert editor.value == 2.5
    assert editor.number.value == "2.5"


def test_int_editor_rounds_text_input() -> None:
    editor = IntEditor(value=3, min=0, max=20, step=1)

    editor.number.value = "2*3.4"

    assert editor.value == 7
    assert editor.number.value == "7"


def test_slider_moves_update_the_text_field() -> None:
    editor = FloatEditor(value=1.0, min=0.0, max=10.0)

    editor.slider.value = 4.25

    assert editor.value == 4.25
    assert editor.number.value == "4.25"


def test_input_convert_plain_and_symbolic_numbers() -> None:
    assert input_convert("12.5") == 12.5
    assert input_convert(" 3e2 ") == 300.0
    assert input_convert("pi/2") == pytest.approx(1.5707963)
    assert input_convert("2.6", int) == 3
    assert input_convert(4, float) == 4.0


@pytest.mark.parametrize("bad", ["", "sqrt(-1)", "x + 1", True, None, "oo"])
def test_input_convert_rejects_non_real_input(bad) -> None:
    with pytest.raises(ValueError):
        input_convert(bad)


def test_input_convert_rejects_unsupported_destination() -> None:
    with pytest.raises(NotImplementedError):
        input_convert("1", complex)  # type: ignore[arg-type]
