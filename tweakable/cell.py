"""Read-write handles into a single table slot."""

from __future__ import annotations

from typing import Any, Callable, List, Protocol, runtime_checkable

from .errors import TweakableTypeError


def value_matches(value: Any, value_type: type) -> bool:
    """Return whether ``value`` may be stored at a site declared as ``value_type``.

    Instances of subclasses match (a ``Color`` is a ``str``), except that
    ``bool`` only matches ``bool`` and ``object`` sites: ``True`` is not a
    number for an ``int`` or ``float`` site.

    Examples
    --------
    >>> value_matches(3, int), value_matches(True, int), value_matches(True, bool)
    (True, False, True)
    """
    if isinstance(value, bool) and value_type not in (bool, object):
        return False
    return isinstance(value, value_type)


@runtime_checkable
class CellLike(Protocol):
    @property
    def value(self) -> Any: ...

    @value.setter
    def value(self, v: Any) -> None: ...

    def watch(self, callback: Callable[[Any], None]) -> None: ...


class Cell:
    """Cell built from a getter and a setter.

    Editors read ``cell.value`` to display the current value and assign to it
    to request an edit. They never see where the value is stored.

    Parameters
    ----------
    get : callable
        Zero-argument function returning the current value.
    set : callable
        One-argument function storing a new value.

    Examples
    --------
    >>> box = {"v": 1}
    >>> cell = Cell(lambda: box["v"], lambda v: box.__setitem__("v", v))
    >>> cell.value = 5
    >>> box["v"]
    5
    """

    def __init__(self, get: Callable[[], Any], set: Callable[[Any], None]) -> None:
        self._get = get
        self._set = set
        self._watchers: List[Callable[[Any], None]] = []

    @property
    def value(self) -> Any:
        return self._get()

    @value.setter
    def value(self, v: Any) -> None:
        self._set(v)

    @property
    def watcher_count(self) -> int:
        return len(self._watchers)

    def watch(self, callback: Callable[[Any], None]) -> None:
        """Call ``callback(value)`` whenever the owner calls :meth:`refresh`."""
        self._watchers.append(callback)

    def unwatch(self, callback: Callable[[Any], None]) -> None:
        """Remove ``callback``; unknown callbacks are ignored."""
        try:
            self._watchers.remove(callback)
        except ValueError:
            pass

    def refresh(self) -> None:
        """Push the current value to every watcher."""
        if not self._watchers:
            return
        current = self.value
        for callback in list(self._watchers):
            callback(current)


class CellView:
    """Handle onto a :class:`Cell` whose watchers can be released together.

    Hand one view to each editor widget and :meth:`close` it when the widget
    is discarded, so the shared cell stops pushing values to it.
    """

    def __init__(self, cell: Cell) -> None:
        self._cell = cell
        self._callbacks: List[Callable[[Any], None]] = []

    @property
    def value(self) -> Any:
        return self._cell.value

    @value.setter
    def value(self, v: Any) -> None:
        self._cell.value = v

    def watch(self, callback: Callable[[Any], None]) -> None:
        self._callbacks.append(callback)
        self._cell.watch(callback)

    def close(self) -> None:
        for callback in self._callbacks:
            self._cell.unwatch(callback)
        self._callbacks = []


class TypedCell:
    """View of an untyped cell that enforces one value type.

    Reading or writing a value that does not match ``value_type`` (see
    :func:`value_matches`) raises :class:`TweakableTypeError`.
    """

    def __init__(self, cell: CellLike, value_type: type, label: str = "") -> None:
        self._cell = cell
        self._value_type = value_type
        self._label = label

    @property
    def value_type(self) -> type:
        return self._value_type

    def _check(self, v: Any) -> Any:
        if not value_matches(v, self._value_type):
            raise TweakableTypeError(self._label, self._value_type, v)
        return v

    @property
    def value(self) -> Any:
        return self._check(self._cell.value)

    @value.setter
    def value(self, v: Any) -> None:
        self._cell.value = self._check(v)

    def watch(self, callback: Callable[[Any], None]) -> None:
        self._cell.watch(lambda v: callback(self._check(v)))
