"""Exception types raised by the tweakable machinery.

Only programming errors surface as exceptions. Rendering without a root and
editing a site that has since unmounted are handled silently elsewhere.
"""

from __future__ import annotations


class TweakableError(Exception):
    """Base class for tweakable errors."""


class TweakableTypeError(TweakableError, TypeError):
    """A stored value was read or written as a type it was not declared with.

    This only happens when two declarations with different value types share
    one :class:`~tweakable.site_key.SiteKey`. It is never caught by the library.
    """

    def __init__(self, label: str, expected: type, actual: object) -> None:
        self.label = label
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Tweakable {label!r} holds {type(actual).__name__} "
            f"but its editor was built for {expected.__name__}."
        )


class SiteCollisionError(TweakableError, ValueError):
    """Two emissions of one pass used the same site key."""

    def __init__(self, key: object) -> None:
        self.key = key
        super().__init__(f"Site {key} was declared more than once in a single pass.")
