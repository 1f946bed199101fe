"""Source-position identity for annotation sites.

A :class:`SiteKey` names one place in the source where a tweakable value is
declared. Keys are derived from the caller's frame, so re-running the same
builder code on every pass produces the same key without any registry.
"""

from __future__ import annotations

import inspect
import os
from collections import Counter
from dataclasses import dataclass
from typing import Iterable, List

NAMED_PREFIX = "<named:"


@dataclass(frozen=True, order=True)
class SiteKey:
    """Identify one annotation call site by ``(file, line, column)``.

    Parameters
    ----------
    file : str
        Source filename of the call site.
    line : int
        1-based line number.
    column : int
        1-based column, or ``0`` when the interpreter does not report columns.

    Notes
    -----
    Field order matters: ``order=True`` compares lexicographically on
    ``(file, line, column)``, which is the display order of the overlay.

    Examples
    --------
    >>> SiteKey("a.py", 5, 1) < SiteKey("a.py", 10, 2)
    True
    """

    file: str
    line: int
    column: int

    @classmethod
    def from_caller(cls, stacklevel: int = 1) -> "SiteKey":
        """Build a key for the frame ``stacklevel`` levels above this call.

        Parameters
        ----------
        stacklevel : int, default=1
            ``1`` is the direct caller of ``from_caller``. Wrappers add one
            level per layer they introduce.

        Returns
        -------
        SiteKey
            Key for the selected frame.
        """
        if stacklevel < 1:
            raise ValueError("stacklevel must be >= 1")
        frame = inspect.currentframe()
        try:
            for _ in range(stacklevel):
                if frame is None:
                    break
                frame = frame.f_back
            if frame is None:
                raise RuntimeError("Call stack is shallower than the requested stacklevel.")
            info = inspect.getframeinfo(frame, context=0)
            positions = getattr(info, "positions", None)
            col_offset = getattr(positions, "col_offset", None)
            column = col_offset + 1 if col_offset is not None else 0
            return cls(file=info.filename, line=int(info.lineno), column=column)
        finally:
            del frame

    @classmethod
    def named(cls, name: str, namespace: str = "") -> "SiteKey":
        """Return an explicit key for sites that share a source position.

        Loops and helper functions declare many values from one line; give
        each of them a stable name instead.

        Examples
        --------
        >>> SiteKey.named("padding").file
        '<named:>padding'
        """
        if not isinstance(name, str) or not name:
            raise ValueError("Explicit site names must be non-empty strings.")
        if ">" in namespace:
            raise ValueError("Site namespaces may not contain '>'.")
        return cls(file=f"{NAMED_PREFIX}{namespace}>{name}", line=0, column=0)

    @property
    def is_named(self) -> bool:
        return self.file.startswith(NAMED_PREFIX)

    @property
    def caption(self) -> str:
        """Short ``file:line`` label shown under each editor."""
        if self.is_named:
            return self.file[len(NAMED_PREFIX):].partition(">")[2]
        return f"{os.path.basename(self.file)}:{self.line}"

    def __str__(self) -> str:
        return f"{self.file}:{self.line}:{self.column}"


def check_unique_sites(keys: Iterable[SiteKey]) -> List[SiteKey]:
    """Return keys that occur more than once, sorted.

    Feed this the keys of *distinct declarations* (for example, every
    annotation constructed while building a tree once). Any result means two
    declarations would share an editor and a stored value.
    """
    counts = Counter(iter(keys))
    return sorted(key for key, n in counts.items() if n > 1)
