# sem "from __future__ import annotations": anotação em string seria
# resolvida na hora da request e pegaria o datetime trocado pelo freeze_time
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Query
from sqlalchemy import select
from sqlalchemy.orm import Session

from crediario.api.deps import DBSession
from crediario.infra.models import CreditSaleORM, TransactionORM
from crediario.schemas.cash import TransactionOut
from crediario.services.reporting import filter_settled_transactions

router = APIRouter()


@router.get("/transactions", response_model=list[TransactionOut])
def list_report_transactions(
    db: Session = DBSession,
    date_from: Optional[datetime] = Query(None),
    date_to: Optional[datetime] = Query(None),
    settled_only: bool = Query(True, description="esconde vendas de crediário ainda em aberto"),
):
    stmt = select(TransactionORM).where(TransactionORM.deleted_at.is_(None))
    if date_from is not None:
        stmt = stmt.where(TransactionORM.created_at >= date_from)
    if date_to is not None:
        stmt = stmt.where(TransactionORM.created_at <= date_to)
    stmt = stmt.order_by(TransactionORM.created_at.desc(), TransactionORM.id.desc())

    txs = db.execute(stmt).scalars().all()
    if not settled_only:
        return txs

    sales = db.execute(select(CreditSaleORM).where(CreditSaleORM.deleted_at.is_(None))).scalars().all()
    return filter_settled_transactions(txs, sales)
