from __future__ import annotations
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from decimal import Decimal
from datetime import datetime
from crediario.infra.models import PaymentMethod
from crediario.schemas.credit_sales import CreditSaleOut


class PaymentCreate(BaseModel):
    # valor <= 0 é barrado no serviço (ValidationError)
    amount: Decimal = Field(max_digits=12, decimal_places=2)
    payment_method: PaymentMethod
    payment_date: Optional[datetime] = None
    session_id: Optional[int] = None
    notes: Optional[str] = None
    # None = segue CREDIT_SALE_RECORD_CASH_ENTRY
    record_cash_entry: Optional[bool] = None


class PaymentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    credit_sale_id: int
    amount: Decimal
    payment_date: datetime
    payment_method: PaymentMethod
    session_id: Optional[int]
    transaction_id: Optional[int]
    notes: Optional[str]


class PaymentRegistrationOut(BaseModel):
    """pagamento + retrato da venda logo após a baixa (para o recibo)."""
    model_config = ConfigDict(from_attributes=True)
    payment: PaymentOut
    sale: CreditSaleOut
    ledger_entry_id: Optional[int]
    ledger_warning: bool
