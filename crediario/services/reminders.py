# crediario/services/reminders.py
from __future__ import annotations

from datetime import datetime, timedelta
from typing import Iterable, List, Optional

from crediario.infra.models import CreditSaleORM, CreditSaleStatus
from crediario.services.dates import as_utc, calendar_days_between, start_of_day

ALERT_FILTERS = ("all", "today", "overdue", "upcoming")
UPCOMING_DAYS = 7


def _parse_hhmm(value: Optional[str]):
    if not value:
        return None
    try:
        hours, _, minutes = value.partition(":")
        return int(hours), int(minutes or 0)
    except ValueError:
        return None


def reminder_moment(sale: CreditSaleORM) -> datetime:
    """quando a venda passa a aparecer como alerta."""
    due_start = start_of_day(as_utc(sale.charge_date))
    prefs = sale.reminder_preferences or {}
    days_before = max(0, int(prefs.get("days_before") or 0))
    moment = due_start - timedelta(days=days_before)

    hhmm = _parse_hhmm(prefs.get("remind_at"))
    if hhmm is not None:
        moment = moment.replace(hour=hhmm[0], minute=hhmm[1])
    return moment


def should_alert(sale: CreditSaleORM, reference: datetime) -> bool:
    if sale.status != CreditSaleStatus.OPEN or sale.deleted_at or sale.archived_at:
        return False

    prefs = sale.reminder_preferences
    if prefs is not None and prefs.get("enabled") is False:
        return False

    reference = as_utc(reference)
    if prefs is None:
        return reference >= start_of_day(as_utc(sale.charge_date))
    return reference >= reminder_moment(sale)


def matches_filter(sale: CreditSaleORM, reference: datetime, alert_filter: str = "all") -> bool:
    due = as_utc(sale.charge_date)
    reference = as_utc(reference)

    if alert_filter == "today":
        return due.date() == reference.date()
    if alert_filter == "overdue":
        return due < start_of_day(reference)
    if alert_filter == "upcoming":
        return due.date() > reference.date() and calendar_days_between(due, reference) <= UPCOMING_DAYS
    return True


def due_alerts(
    sales: Iterable[CreditSaleORM],
    reference: datetime,
    alert_filter: str = "all",
) -> List[CreditSaleORM]:
    if alert_filter not in ALERT_FILTERS:
        raise ValueError(f"filtro inválido: {alert_filter}")
    found = [
        s for s in sales
        if should_alert(s, reference) and matches_filter(s, reference, alert_filter)
    ]
    return sorted(found, key=lambda s: as_utc(s.charge_date))
