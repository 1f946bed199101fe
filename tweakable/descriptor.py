"""Type-erased editor descriptions.

An :class:`EditorDescriptor` lets values of unrelated types share one
definition table. The concrete value type is captured when the descriptor is
created and re-applied each time the editor is rendered.
"""

from __future__ import annotations

from typing import Any, Callable

from .cell import CellLike, TypedCell

Editor = Callable[[str, Any], Any]


class EditorDescriptor:
    """Default value, label and editor for one annotation site.

    Parameters
    ----------
    default_value : Any
        Value used until the site is edited.
    label : str
        Human label shown by the editor.
    value_type : type
        Type every stored value must have.
    render : callable
        Type-erased ``render(label, cell) -> widget``.

    Notes
    -----
    Any two descriptors compare equal. The render function cannot be compared,
    and equality is only used to decide whether consumers need to refresh.
    """

    __slots__ = ("default_value", "label", "value_type", "render")
    __hash__ = None  # type: ignore[assignment]

    def __init__(self, default_value: Any, label: str, value_type: type, render: Callable[[str, CellLike], Any]) -> None:
        self.default_value = default_value
        self.label = label
        self.value_type = value_type
        self.render = render

    @classmethod
    def create(cls, default_value: Any, label: str, editor: Editor) -> "EditorDescriptor":
        """Wrap a typed ``editor(label, cell)`` into a descriptor.

        The wrapper hands ``editor`` a :class:`TypedCell` bound to
        ``type(default_value)``, so an editor built for floats can never see a
        value of another type without raising
        :class:`~tweakable.errors.TweakableTypeError`.

        Examples
        --------
        >>> from tweakable.cell import Cell
        >>> desc = EditorDescriptor.create(10, "padding", lambda label, cell: (label, cell.value))
        >>> desc.render("padding", Cell(lambda: 12, lambda v: None))
        ('padding', 12)
        """
        value_type = type(default_value)

        def render(render_label: str, cell: CellLike) -> Any:
            return editor(render_label, TypedCell(cell, value_type, render_label))

        return cls(default_value, label, value_type, render)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, EditorDescriptor):
            return NotImplemented
        return True

    def __repr__(self) -> str:
        return (
            f"EditorDescriptor(label={self.label!r}, default_value={self.default_value!r}, "
            f"value_type={self.value_type.__name__})"
        )
