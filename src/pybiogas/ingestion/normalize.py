"""Normalization helpers.

Centralizes tolerant numeric parsing of controller text.
"""

from __future__ import annotations

import math
import re
from typing import Any

# Leading decimal literal of a digit/decimal-point run ("25.00" -> 25.00,
# "1.2.3" -> 1.2, "." -> no number).
_LEADING_DECIMAL = re.compile(r"\d+(?:\.\d*)?|\.\d+")
_LEADING_INTEGER = re.compile(r"\d+")


def safe_float(value: Any) -> float | None:
    if value is None:
        return None
    match = _LEADING_DECIMAL.match(str(value).strip())
    if match is None:
        return None
    result = float(match.group(0))
    if math.isnan(result) or math.isinf(result):
        return None
    return result


def safe_uint(value: Any) -> int | None:
    if value is None:
        return None
    match = _LEADING_INTEGER.match(str(value).strip())
    if match is None:
        return None
    return int(match.group(0))
