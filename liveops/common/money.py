"""Integer currency helpers (amounts are in the smallest currency unit)."""

from __future__ import annotations

import logging
import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

logger = logging.getLogger(__name__)

# "6.000.000" / "6,000,000": every separator groups thousands.
_GROUPED_THOUSANDS = re.compile(r"^-?\d{1,3}([.,]\d{3})+$")


def round_half_up(value: Any) -> int:
    """Round to the nearest integer, halves away from zero."""
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def _normalize_amount_text(text: str) -> str:
    if _GROUPED_THOUSANDS.match(text):
        return text.replace(".", "").replace(",", "")
    cut = max(text.rfind("."), text.rfind(","))
    if cut == -1:
        return text
    whole = text[:cut].replace(".", "").replace(",", "")
    return f"{whole}.{text[cut + 1:]}"


def coerce_amount(value: Any) -> int:
    """Lenient amount coercion: missing or garbled values become 0.

    Strings whose separators all group thousands drop them; otherwise the
    last ``.`` or ``,`` is the decimal point.
    """
    if value is None or value == "" or isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        value = _normalize_amount_text(value.strip())
    try:
        return round_half_up(value)
    except (InvalidOperation, ValueError, TypeError):
        logger.warning("Unusable amount %r treated as 0", value)
        return 0
