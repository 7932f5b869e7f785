"""Money parsing shared by the normalizer and the match scorer."""

import math
import re
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

_NUMBER_RE = re.compile(
    r"(?<![\d.])(?P<number>-?\d+(?:\.\d+)?|-?\.\d+)\s*(?P<suffix>billion|million|thousand|bn|mil|mn|[kmb])?(?![a-z])",
    re.IGNORECASE,
)

_MULTIPLIERS = {
    "k": 1_000,
    "thousand": 1_000,
    "m": 1_000_000,
    "million": 1_000_000,
    "mil": 1_000_000,
    "mn": 1_000_000,
    "b": 1_000_000_000,
    "bn": 1_000_000_000,
    "billion": 1_000_000_000,
}


def parse_money(value: Any) -> Optional[float]:
    """Parse a numeric or currency-formatted value into dollars.

    "$1,200,000" -> 1200000.0, "50K" -> 50000.0, "2.5M" -> 2500000.0.
    Anything that carries no number ("N/A", "", None, True) is None, never 0.
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, (int, float, Decimal)):
        number = float(value)
        return None if math.isnan(number) or math.isinf(number) else number

    if not isinstance(value, str):
        return None

    cleaned = value.replace("$", "").replace(",", "").strip()
    match = _NUMBER_RE.search(cleaned)
    if not match:
        return None

    try:
        number = Decimal(match.group("number"))
    except InvalidOperation:
        return None

    suffix = (match.group("suffix") or "").lower()
    if suffix:
        number *= _MULTIPLIERS[suffix]
    return float(number)
