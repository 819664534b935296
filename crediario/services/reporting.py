# crediario/services/reporting.py
"""
Leitura do crediário para relatórios. Nada aqui altera estado.
"""
from __future__ import annotations

from datetime import datetime, timedelta
from decimal import Decimal
from typing import Dict, Iterable, List

from crediario.infra.models import CreditSaleORM, CreditSaleStatus, TransactionORM
from crediario.services import money
from crediario.services.dates import as_utc, start_of_day
from crediario.services.reminders import UPCOMING_DAYS


def build_status_map(sales: Iterable[CreditSaleORM]) -> Dict[int, CreditSaleStatus]:
    return {s.id: s.status for s in sales if s.id is not None}


def is_transaction_settled(tx: TransactionORM, statuses: Dict[int, CreditSaleStatus]) -> bool:
    # lançamento sem crediário sempre conta; com crediário só depois de quitado
    if tx.credit_sale_id is None:
        return True
    return statuses.get(tx.credit_sale_id) == CreditSaleStatus.PAID


def filter_settled_transactions(
    transactions: Iterable[TransactionORM],
    sales: Iterable[CreditSaleORM],
) -> List[TransactionORM]:
    transactions = list(transactions)
    statuses = build_status_map(sales)
    if not statuses:
        return transactions
    return [tx for tx in transactions if is_transaction_settled(tx, statuses)]


def computed_status(sale: CreditSaleORM, today: datetime) -> str:
    """paid | overdue | pending"""
    if sale.status == CreditSaleStatus.PAID:
        return "paid"
    if start_of_day(as_utc(sale.charge_date)) < start_of_day(as_utc(today)):
        return "overdue"
    return "pending"


def credit_sales_summary(sales: Iterable[CreditSaleORM], today: datetime) -> dict:
    today_start = start_of_day(as_utc(today))
    upcoming_start = today_start + timedelta(days=1)
    upcoming_end = today_start + timedelta(days=UPCOMING_DAYS + 1)

    active = [s for s in sales if not s.deleted_at and not s.archived_at]

    def _due(s: CreditSaleORM) -> Decimal:
        return s.remaining_amount if s.remaining_amount is not None else s.total

    overdue = [s for s in active if computed_status(s, today) == "overdue"]
    due_today = [
        s for s in active
        if computed_status(s, today) != "paid"
        and start_of_day(as_utc(s.charge_date)) == today_start
    ]
    upcoming = [
        s for s in active
        if computed_status(s, today) == "pending"
        and upcoming_start <= as_utc(s.charge_date) < upcoming_end
    ]
    outstanding = [s for s in active if computed_status(s, today) != "paid"]

    def _sum(group) -> Decimal:
        return money.round2(sum((_due(s) for s in group), money.ZERO))

    outstanding_total = _sum(outstanding)
    average_ticket = (
        money.round2(outstanding_total / len(outstanding)) if outstanding else money.ZERO
    )

    return {
        "active_count": len(active),
        "overdue_count": len(overdue),
        "due_today_count": len(due_today),
        "upcoming_count": len(upcoming),
        "outstanding_count": len(outstanding),
        "outstanding_total": outstanding_total,
        "overdue_total": _sum(overdue),
        "due_today_total": _sum(due_today),
        "upcoming_total": _sum(upcoming),
        "average_ticket": average_ticket,
    }
