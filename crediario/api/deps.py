from fastapi import Depends, HTTPException
from sqlalchemy.orm import Session

from crediario.infra.db import get_db
from crediario.infra.repositories import SqlCreditSaleRepository
from crediario.services.cash import SqlCashLedger, SqlCashSessionProvider
from crediario.services.credit_sale_ledger import CreditSaleLedger
from crediario.services.errors import (
    AlreadySettledError,
    ConcurrentUpdateError,
    CreditSaleError,
    NotFoundError,
)
from crediario.services.payment_registrar import PaymentRegistrar

DBSession = Depends(get_db)


def get_ledger(db: Session = DBSession) -> CreditSaleLedger:
    return CreditSaleLedger(SqlCreditSaleRepository(db))


def get_registrar(db: Session = DBSession) -> PaymentRegistrar:
    repo = SqlCreditSaleRepository(db)
    return PaymentRegistrar(
        CreditSaleLedger(repo),
        repo,
        cash_ledger=SqlCashLedger(db),
        sessions=SqlCashSessionProvider(db),
    )


def http_error(e: CreditSaleError) -> HTTPException:
    if isinstance(e, NotFoundError):
        return HTTPException(status_code=404, detail=str(e))
    if isinstance(e, (AlreadySettledError, ConcurrentUpdateError)):
        return HTTPException(status_code=409, detail=str(e))
    # ValidationError, OverpaymentError
    return HTTPException(status_code=400, detail=str(e))
