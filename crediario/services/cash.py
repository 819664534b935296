# crediario/services/cash.py
"""
Colaboradores do caixa usados pelo crediário.

O fluxo de abrir/fechar caixa e o CRUD de lançamentos ficam fora daqui;
só existe o necessário para marcar o pagamento com a sessão aberta e
lançar a entrada correspondente no caixa.
"""
from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional, Protocol

from sqlalchemy import select
from sqlalchemy.orm import Session

from crediario.infra.models import (
    CashSessionORM,
    PaymentMethod,
    TransactionORM,
    TransactionType,
)


class CashSessionProvider(Protocol):
    def get_current_session_id(self) -> Optional[int]:
        ...


class CashLedger(Protocol):
    def append_entry(
        self,
        *,
        description: str,
        amount: Decimal,
        payment_method: PaymentMethod,
        created_at: datetime,
        session_id: Optional[int] = None,
        notes: Optional[str] = None,
    ) -> int:
        ...


class SqlCashSessionProvider:
    def __init__(self, db: Session):
        self.db = db

    def get_current_session_id(self) -> Optional[int]:
        stmt = (
            select(CashSessionORM.id)
            .where(CashSessionORM.is_open.is_(True))
            .order_by(CashSessionORM.opened_at.desc(), CashSessionORM.id.desc())
            .limit(1)
        )
        return self.db.scalar(stmt)


class SqlCashLedger:
    """
    grava o lançamento num SAVEPOINT: se falhar, só ele volta atrás
    e a transação do pagamento segue viva.
    """

    def __init__(self, db: Session):
        self.db = db

    def append_entry(
        self,
        *,
        description: str,
        amount: Decimal,
        payment_method: PaymentMethod,
        created_at: datetime,
        session_id: Optional[int] = None,
        notes: Optional[str] = None,
    ) -> int:
        tx = TransactionORM(
            session_id=session_id,
            type=TransactionType.SALE,
            description=description[:255],
            quantity=1,
            unit_price=amount,
            total=amount,
            payment_method=payment_method,
            created_at=created_at,
            notes=notes,
        )
        with self.db.begin_nested():
            self.db.add(tx)
            self.db.flush()
        return tx.id


def payment_entry_description(sale_description: str) -> str:
    return f"Pagamento crediário: {sale_description}"
