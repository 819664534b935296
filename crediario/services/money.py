# crediario/services/money.py
from __future__ import annotations

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Iterable, Optional, Union

from crediario.services.errors import ValidationError

Number = Union[Decimal, int, float, str]

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def to_decimal(v: Number) -> Decimal:
    if isinstance(v, Decimal):
        return v
    try:
        if isinstance(v, float):
            # via str para não herdar o ruído binário do float
            return Decimal(repr(v))
        return Decimal(v)
    except (InvalidOperation, TypeError, ValueError) as e:
        raise ValidationError(f"Valor inválido: {v!r}") from e


def round2(v: Number) -> Decimal:
    """arredonda para centavos, meio para cima."""
    d = to_decimal(v)
    if not d.is_finite():
        raise ValidationError(f"Valor inválido: {v!r}")
    try:
        return d.quantize(CENT, rounding=ROUND_HALF_UP)
    except InvalidOperation as e:
        # não cabe em centavos na precisão do contexto (ex.: 1e30)
        raise ValidationError(f"Valor fora do limite: {v!r}") from e


def remaining_amount(total: Number, amount_paid: Number) -> Decimal:
    remaining = round2(to_decimal(total) - to_decimal(amount_paid))
    return remaining if remaining > 0 else ZERO


def installment_value(total: Number, installments: int) -> Optional[Decimal]:
    if installments is None or installments <= 1:
        return None
    return round2(to_decimal(total) / Decimal(installments))


def line_total(quantity: int, unit_price: Number, total: Optional[Number] = None) -> Decimal:
    if total is not None:
        return round2(total)
    return round2(Decimal(quantity) * to_decimal(unit_price))


def items_total(line_totals: Iterable[Number]) -> Optional[Decimal]:
    values = [to_decimal(t) for t in line_totals]
    if not values:
        return None
    return round2(sum(values, ZERO))
