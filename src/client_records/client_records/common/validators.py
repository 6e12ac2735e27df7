from __future__ import annotations

import math
from typing import Any, Optional


def clean_text(value: Any) -> str:
    """Coerce a loosely-typed form/JSON value to a trimmed string ('' for None)."""
    if value is None:
        return ""
    return str(value).strip()


def parse_amount(value: Any) -> Optional[float]:
    """Numeric-coerce an amount.

    Blank or missing means 0. Returns None when the value is not a finite number.
    """
    if value is None:
        return 0.0
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        text = str(value).strip()
        if not text:
            return 0.0
        try:
            number = float(text)
        except ValueError:
            return None
    return number if math.isfinite(number) else None
