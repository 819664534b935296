# sem "from __future__ import annotations": anotação em string seria
# resolvida na hora da request e pegaria o datetime trocado pelo freeze_time
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from crediario.api.deps import get_ledger, get_registrar, http_error
from crediario.infra.models import CreditSaleStatus
from crediario.schemas.credit_sales import (
    CreditSaleCreate,
    CreditSaleOut,
    CreditSalePostpone,
    CreditSalesSummaryOut,
    CreditSaleUpdate,
)
from crediario.schemas.payments import PaymentCreate, PaymentOut, PaymentRegistrationOut
from crediario.services.credit_sale_ledger import CreditSaleLedger
from crediario.services.dates import now_utc
from crediario.services.errors import CreditSaleError
from crediario.services.payment_registrar import PaymentRegistrar
from crediario.services.reminders import ALERT_FILTERS, due_alerts
from crediario.services.reporting import credit_sales_summary

router = APIRouter()

Ledger = Depends(get_ledger)
Registrar = Depends(get_registrar)


@router.post("", response_model=CreditSaleOut, status_code=201)
def create_credit_sale(payload: CreditSaleCreate, ledger: CreditSaleLedger = Ledger):
    try:
        return ledger.create(payload)
    except CreditSaleError as e:
        raise http_error(e)


@router.get("", response_model=list[CreditSaleOut])
def list_credit_sales(
    ledger: CreditSaleLedger = Ledger,
    status: Optional[str] = Query(default=None, description="em_aberto|paga"),
    include_archived: bool = Query(default=False),
):
    if not status:
        return ledger.list_active()
    try:
        st = CreditSaleStatus(status)
    except ValueError:
        raise HTTPException(status_code=400, detail="Status inválido (em_aberto|paga).")
    return ledger.list_by_settlement(st, include_archived=include_archived)


@router.get("/trash", response_model=list[CreditSaleOut])
def list_trash(ledger: CreditSaleLedger = Ledger):
    return ledger.list_deleted()


@router.get("/alerts", response_model=list[CreditSaleOut])
def list_alerts(
    ledger: CreditSaleLedger = Ledger,
    alert_filter: str = Query(default="all", alias="filter", description="all|today|overdue|upcoming"),
    reference: Optional[datetime] = Query(default=None),
):
    if alert_filter not in ALERT_FILTERS:
        raise HTTPException(status_code=400, detail="Filtro inválido (all|today|overdue|upcoming).")
    return due_alerts(ledger.list_active(), reference or now_utc(), alert_filter)


@router.get("/summary", response_model=CreditSalesSummaryOut)
def summary(ledger: CreditSaleLedger = Ledger):
    return credit_sales_summary(ledger.list_active(), now_utc())


@router.get("/{sale_id}", response_model=CreditSaleOut)
def get_credit_sale(sale_id: int, ledger: CreditSaleLedger = Ledger):
    try:
        return ledger.get(sale_id)
    except CreditSaleError as e:
        raise http_error(e)


@router.put("/{sale_id}", response_model=CreditSaleOut)
def update_credit_sale(sale_id: int, payload: CreditSaleUpdate, ledger: CreditSaleLedger = Ledger):
    try:
        return ledger.update(sale_id, payload)
    except CreditSaleError as e:
        raise http_error(e)


@router.post("/{sale_id}/payments", response_model=PaymentRegistrationOut, status_code=201)
def register_payment(sale_id: int, payload: PaymentCreate, registrar: PaymentRegistrar = Registrar):
    try:
        result = registrar.register_payment(
            sale_id,
            amount=payload.amount,
            payment_method=payload.payment_method,
            payment_date=payload.payment_date,
            session_id=payload.session_id,
            notes=payload.notes,
            record_cash_entry=payload.record_cash_entry,
        )
    except CreditSaleError as e:
        raise http_error(e)
    return PaymentRegistrationOut.model_validate(result)


@router.get("/{sale_id}/payments", response_model=list[PaymentOut])
def list_payments(sale_id: int, ledger: CreditSaleLedger = Ledger):
    try:
        return ledger.get_payments_for_sale(sale_id)
    except CreditSaleError as e:
        raise http_error(e)


@router.post("/{sale_id}/postpone", response_model=CreditSaleOut)
def postpone(sale_id: int, payload: CreditSalePostpone, ledger: CreditSaleLedger = Ledger):
    try:
        return ledger.postpone(
            sale_id,
            charge_date=payload.charge_date,
            reminder_preferences=payload.reminder_preferences,
            notes=payload.notes,
            allow_earlier=payload.allow_earlier,
        )
    except CreditSaleError as e:
        raise http_error(e)


@router.post("/{sale_id}/archive", response_model=CreditSaleOut)
def archive(sale_id: int, ledger: CreditSaleLedger = Ledger):
    try:
        return ledger.archive(sale_id)
    except CreditSaleError as e:
        raise http_error(e)


@router.post("/{sale_id}/unarchive", response_model=CreditSaleOut)
def unarchive(sale_id: int, ledger: CreditSaleLedger = Ledger):
    try:
        return ledger.unarchive(sale_id)
    except CreditSaleError as e:
        raise http_error(e)


@router.delete("/{sale_id}", status_code=204)
def remove(sale_id: int, ledger: CreditSaleLedger = Ledger):
    try:
        ledger.remove(sale_id)
    except CreditSaleError as e:
        raise http_error(e)


@router.post("/{sale_id}/restore", response_model=CreditSaleOut)
def restore(sale_id: int, ledger: CreditSaleLedger = Ledger):
    try:
        return ledger.restore(sale_id)
    except CreditSaleError as e:
        raise http_error(e)
