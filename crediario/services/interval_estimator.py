# crediario/services/interval_estimator.py
"""
Estimativa do intervalo (em dias) entre parcelas de uma venda a prazo.

A venda não guarda o cronograma de parcelas, só uma data de cobrança
rolante. O intervalo é reconstruído a partir do que já foi observado:
data da venda, cobrança atual, quanto já foi pago e o valor nominal
da parcela. É uma aproximação, não um plano de parcelas real.
"""
from __future__ import annotations

import logging
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

from dateutil.relativedelta import relativedelta

from crediario.services.dates import DateLike, calendar_days_between, parse_datetime
from crediario.services.money import Number, to_decimal

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL_DAYS = 30


def installments_paid(
    *,
    total: Number,
    installments: int,
    installment_value: Optional[Number],
    amount_paid: Number,
) -> int:
    base: Optional[Decimal] = None
    if installment_value is not None:
        base = to_decimal(installment_value)
    elif installments and installments > 0:
        base = to_decimal(total) / Decimal(installments)

    if base is None or base <= 0:
        return 0
    return int(to_decimal(amount_paid) // base)


def estimate_interval_days(
    *,
    sale_date: DateLike,
    charge_date: DateLike,
    total: Number,
    installments: int,
    installment_value: Optional[Number],
    amount_paid: Number,
) -> Optional[int]:
    """
    Retorna o intervalo estimado em dias, ou None quando não há base
    para estimar (o chamador usa DEFAULT_INTERVAL_DAYS).

    `amount_paid` deve ser o valor pago ANTES do pagamento atual.
    """
    sale_dt = parse_datetime(sale_date)
    charge_dt = parse_datetime(charge_date)
    if sale_dt is None or charge_dt is None:
        logger.warning(
            "interval estimate skipped: invalid dates sale_date=%r charge_date=%r",
            sale_date, charge_date,
        )
        return None

    paid_count = installments_paid(
        total=total,
        installments=installments,
        installment_value=installment_value,
        amount_paid=amount_paid,
    )
    total_days = max(calendar_days_between(charge_dt, sale_dt), 0)

    if paid_count > 0:
        # round() do python arredonda .5 para o par; aqui é meio para cima
        interval = int((Decimal(total_days) / Decimal(paid_count)).to_integral_value(rounding=ROUND_HALF_UP))
        return interval if interval > 0 else None

    return total_days if total_days > 0 else None


def project_next_charge_date(
    charge_date: datetime,
    interval_days: Optional[int],
    default_days: int = DEFAULT_INTERVAL_DAYS,
) -> datetime:
    return charge_date + relativedelta(days=interval_days or default_days)
