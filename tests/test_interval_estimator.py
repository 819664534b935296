from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal

from crediario.services.interval_estimator import (
    DEFAULT_INTERVAL_DAYS,
    estimate_interval_days,
    installments_paid,
    project_next_charge_date,
)


def _dt(y, m, d):
    return datetime(y, m, d, 12, 0, tzinfo=timezone.utc)


def test_no_payments_uses_gap_between_sale_and_charge():
    interval = estimate_interval_days(
        sale_date=_dt(2026, 1, 1),
        charge_date=_dt(2026, 1, 31),
        total=Decimal("300.00"),
        installments=3,
        installment_value=Decimal("100.00"),
        amount_paid=Decimal("0.00"),
    )
    assert interval == 30


def test_divides_elapsed_days_by_installments_paid():
    # 2 parcelas pagas, cobrança atual 61 dias depois da venda -> round(30.5) = 31
    interval = estimate_interval_days(
        sale_date=_dt(2026, 1, 1),
        charge_date=_dt(2026, 3, 3),
        total=Decimal("300.00"),
        installments=3,
        installment_value=Decimal("100.00"),
        amount_paid=Decimal("200.00"),
    )
    assert interval == 31


def test_same_day_without_payments_has_no_estimate():
    interval = estimate_interval_days(
        sale_date=_dt(2026, 1, 1),
        charge_date=_dt(2026, 1, 1),
        total=Decimal("300.00"),
        installments=3,
        installment_value=None,
        amount_paid=Decimal("0.00"),
    )
    assert interval is None
    assert project_next_charge_date(_dt(2026, 1, 1), interval) == _dt(2026, 1, 31)
    assert DEFAULT_INTERVAL_DAYS == 30


def test_charge_before_sale_is_clamped_to_zero():
    interval = estimate_interval_days(
        sale_date=_dt(2026, 2, 1),
        charge_date=_dt(2026, 1, 1),
        total=Decimal("300.00"),
        installments=3,
        installment_value=Decimal("100.00"),
        amount_paid=Decimal("100.00"),
    )
    assert interval is None


def test_invalid_dates_short_circuit():
    interval = estimate_interval_days(
        sale_date="não é data",
        charge_date="2026-01-31",
        total=Decimal("300.00"),
        installments=3,
        installment_value=None,
        amount_paid=Decimal("0.00"),
    )
    assert interval is None


def test_iso_strings_are_accepted():
    interval = estimate_interval_days(
        sale_date="2026-01-01",
        charge_date="2026-01-16T09:30:00Z",
        total="100",
        installments=2,
        installment_value=None,
        amount_paid="0",
    )
    assert interval == 15


def test_installments_paid_uses_total_when_value_missing():
    assert installments_paid(
        total=Decimal("300.00"), installments=3, installment_value=None, amount_paid=Decimal("250.00")
    ) == 2
    assert installments_paid(
        total=Decimal("300.00"), installments=0, installment_value=None, amount_paid=Decimal("250.00")
    ) == 0
