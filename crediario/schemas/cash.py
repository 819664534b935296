from __future__ import annotations
from pydantic import BaseModel, ConfigDict
from typing import Optional
from decimal import Decimal
from datetime import datetime
from crediario.infra.models import PaymentMethod, TransactionType


class TransactionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    session_id: Optional[int]
    type: TransactionType
    description: str
    quantity: int
    unit_price: Decimal
    total: Decimal
    payment_method: PaymentMethod
    notes: Optional[str]
    credit_sale_id: Optional[int]
    created_at: datetime
