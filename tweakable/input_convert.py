# === SECTION: input_convert [id: input_convert]===
from __future__ import annotations

import math
from typing import Any, Type, TypeVar

import sympy as sp

N = TypeVar("N", int, float)


def input_convert(obj: Any, dest_type: Type[N] = float) -> N:
    """
    Convert user input to a real number of type `dest_type`.

    Numeric editors accept free text such as ``"12.5"``, ``"3e2"`` or
    ``"pi*40"``. Text that Python cannot parse directly is handed to SymPy and
    evaluated numerically.

    Rules:
    - bool is rejected (a checkbox value is never a number here).
    - Complex results are rejected unless the imaginary part is exactly 0.
    - `int` destinations round to the nearest integer (ties to even).

    Raises
    ------
    NotImplementedError
        If dest_type is not int or float.
    ValueError
        If the input cannot be read as a real number.
    """
    if dest_type not in (float, int):
        raise NotImplementedError(f"Unsupported destination type: {dest_type!r}.")

    if isinstance(obj, bool):
        raise ValueError(f"Refusing to read boolean {obj!r} as a number.")

    if isinstance(obj, (int, float)):
        real = float(obj)
    elif isinstance(obj, str):
        text = obj.strip()
        if not text:
            raise ValueError(f"Cannot convert empty string to {dest_type.__name__}.")
        try:
            real = float(text)
        except ValueError:
            real = _evaluate(text)
    else:
        raise ValueError(f"Could not convert {obj!r} to {dest_type.__name__}.")

    if not math.isfinite(real):
        raise ValueError(f"{obj!r} is not a finite number.")
    if dest_type is int:
        return round(real)  # type: ignore[return-value]
    return real  # type: ignore[return-value]


def _evaluate(text: str) -> float:
    try:
        value = complex(sp.sympify(text).evalf())
    except (sp.SympifyError, TypeError, ValueError, SyntaxError) as e:
        raise ValueError(f"Could not read {text!r} as a number (neither directly nor via SymPy).") from e
    if value.imag != 0:
        raise ValueError(f"{text!r} is not real: imaginary part is non-zero.")
    return value.real

# === END OF SECTION: input_convert [id: input_convert]===
