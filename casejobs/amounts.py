from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Optional, Union

Number = Union[Decimal, int, float, str]

CENT = Decimal("0.01")


@dataclass(frozen=True)
class AmountBreakdown:
    total: Decimal
    base: Decimal
    vat: Decimal
    rate: int


def _to_decimal(value: Number) -> Decimal:
    if isinstance(value, Decimal):
        return value
    # str() keeps 0.1 as 0.1 instead of its binary expansion
    return Decimal(str(value))


def round2(value: Number) -> Decimal:
    """Round half away from zero to two places."""
    return _to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def decompose(total: Number, rate: int = 20) -> AmountBreakdown:
    """Split a VAT-inclusive total into base and VAT."""
    total_value = round2(total)
    divisor = Decimal(1) + Decimal(rate) / Decimal(100)
    base = round2(total_value / divisor)
    vat = round2(total_value - base)
    return AmountBreakdown(total=total_value, base=base, vat=vat, rate=rate)


def compose(base: Number, rate: int = 20) -> AmountBreakdown:
    """Build the VAT-inclusive total from a base amount."""
    base_value = round2(base)
    vat = round2(base_value * Decimal(rate) / Decimal(100))
    total = round2(base_value + vat)
    return AmountBreakdown(total=total, base=base_value, vat=vat, rate=rate)


def parse_amount(value: object) -> Optional[Decimal]:
    """Read a statement amount; commas are thousands separators."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float, Decimal)):
        parsed = _to_decimal(value)
    else:
        text = str(value).strip().replace(",", "").replace(" ", "")
        if not text:
            return None
        try:
            parsed = Decimal(text)
        except InvalidOperation:
            return None
    if not parsed.is_finite():
        return None
    return parsed


__all__ = ["AmountBreakdown", "round2", "decompose", "compose", "parse_amount"]
