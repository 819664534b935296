# crediario/infra/repositories.py
"""
Porta de persistência do crediário.

Os serviços recebem um CreditSaleRepository por injeção; a implementação
SQLAlchemy abaixo é a usada pela API e pelos testes.
"""
from __future__ import annotations

import logging
from typing import List, Optional, Protocol

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload
from sqlalchemy.orm.exc import StaleDataError

from crediario.infra.models import (
    CreditSaleORM,
    CreditSalePaymentORM,
    CreditSaleStatus,
)
from crediario.services.errors import ConcurrentUpdateError

logger = logging.getLogger(__name__)


class CreditSaleRepository(Protocol):
    def get(
        self,
        sale_id: int,
        *,
        for_update: bool = False,
        include_deleted: bool = False,
    ) -> Optional[CreditSaleORM]:
        ...

    def add(self, sale: CreditSaleORM) -> CreditSaleORM:
        ...

    def save(self, sale: CreditSaleORM) -> CreditSaleORM:
        ...

    def add_payment(self, payment: CreditSalePaymentORM) -> CreditSalePaymentORM:
        ...

    def list_active(self) -> List[CreditSaleORM]:
        ...

    def list_by_status(
        self, status: CreditSaleStatus, *, include_archived: bool = False
    ) -> List[CreditSaleORM]:
        ...

    def list_deleted(self) -> List[CreditSaleORM]:
        ...

    def list_payments(self, sale_id: int) -> List[CreditSalePaymentORM]:
        ...


class SqlCreditSaleRepository:
    def __init__(self, db: Session):
        self.db = db

    def _base(self):
        return select(CreditSaleORM).options(selectinload(CreditSaleORM.items))

    def get(
        self,
        sale_id: int,
        *,
        for_update: bool = False,
        include_deleted: bool = False,
    ) -> Optional[CreditSaleORM]:
        stmt = self._base().where(CreditSaleORM.id == sale_id)
        if not include_deleted:
            stmt = stmt.where(CreditSaleORM.deleted_at.is_(None))
        if for_update:
            # SQLite ignora FOR UPDATE; lá vale só o version_id_col
            stmt = stmt.with_for_update()
        try:
            return self.db.execute(stmt).scalars().first()
        except StaleDataError as e:
            # com FOR UPDATE o ORM confere a versão já na leitura
            raise self._conflict(e) from e

    def add(self, sale: CreditSaleORM) -> CreditSaleORM:
        self.db.add(sale)
        self._flush()
        return sale

    def save(self, sale: CreditSaleORM) -> CreditSaleORM:
        self.db.add(sale)
        self._flush()
        return sale

    def add_payment(self, payment: CreditSalePaymentORM) -> CreditSalePaymentORM:
        self.db.add(payment)
        self._flush()
        return payment

    def _flush(self) -> None:
        try:
            self.db.flush()
        except StaleDataError as e:
            raise self._conflict(e) from e

    def _conflict(self, e: StaleDataError) -> ConcurrentUpdateError:
        logger.warning("credit sale changed concurrently: %s", e)
        return ConcurrentUpdateError(
            "A venda foi alterada por outra operação. Recarregue e tente novamente."
        )

    def list_active(self) -> List[CreditSaleORM]:
        stmt = (
            self._base()
            .where(CreditSaleORM.deleted_at.is_(None), CreditSaleORM.archived_at.is_(None))
            .order_by(CreditSaleORM.charge_date.asc(), CreditSaleORM.id.asc())
        )
        return list(self.db.execute(stmt).scalars().all())

    def list_by_status(
        self, status: CreditSaleStatus, *, include_archived: bool = False
    ) -> List[CreditSaleORM]:
        stmt = self._base().where(
            CreditSaleORM.deleted_at.is_(None),
            CreditSaleORM.status == status,
        )
        if not include_archived:
            stmt = stmt.where(CreditSaleORM.archived_at.is_(None))
        stmt = stmt.order_by(CreditSaleORM.charge_date.asc(), CreditSaleORM.id.asc())
        return list(self.db.execute(stmt).scalars().all())

    def list_deleted(self) -> List[CreditSaleORM]:
        stmt = (
            self._base()
            .where(CreditSaleORM.deleted_at.is_not(None))
            .order_by(CreditSaleORM.deleted_at.desc())
        )
        return list(self.db.execute(stmt).scalars().all())

    def list_payments(self, sale_id: int) -> List[CreditSalePaymentORM]:
        stmt = (
            select(CreditSalePaymentORM)
            .where(CreditSalePaymentORM.credit_sale_id == sale_id)
            .order_by(CreditSalePaymentORM.payment_date.desc(), CreditSalePaymentORM.id.desc())
        )
        return list(self.db.execute(stmt).scalars().all())
