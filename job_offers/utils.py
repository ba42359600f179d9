"""Utility helpers shared across the package."""

from __future__ import annotations

import math
from typing import Any, Iterable, List, Optional, Union


def first_present(*values: Any) -> Optional[Any]:
    """Return the first value that is not None and not a blank string."""
    for val in values:
        if val is None:
            continue
        if isinstance(val, str) and not val.strip():
            continue
        return val
    return None


def format_number(value: Union[int, float]) -> str:
    """Render a numeric bound, dropping a trailing '.0' for integral floats."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def join_nonempty(items: Optional[Iterable[Any]], sep: str = ", ") -> Optional[str]:
    """Join the non-blank items of a list, or return None when nothing is left."""
    if not items:
        return None
    parts: List[str] = [str(it).strip() for it in items if it is not None and str(it).strip()]
    return sep.join(parts) if parts else None


def ceil_div(numerator: int, denominator: int) -> int:
    """Integer ceiling division for page counts."""
    return math.ceil(numerator / denominator) if denominator else 0
