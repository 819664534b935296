from __future__ import annotations
from pydantic import BaseModel, Field, ConfigDict
from typing import Optional, List
from decimal import Decimal
from datetime import datetime
from crediario.infra.models import CreditSaleStatus


class ReminderPreferences(BaseModel):
    enabled: bool = True
    days_before: int = Field(default=0, ge=0, le=365)
    remind_at: Optional[str] = Field(default=None, pattern=r"^([01]\d|2[0-3]):[0-5]\d$")  # HH:MM


class CreditSaleItemIn(BaseModel):
    description: str = Field(min_length=1, max_length=255)
    quantity: int = Field(ge=1)
    unit_price: Decimal = Field(ge=0, max_digits=12, decimal_places=2)
    # se não vier, quantity * unit_price
    total: Optional[Decimal] = Field(default=None, ge=0, max_digits=12, decimal_places=2)


class CreditSaleCreate(BaseModel):
    # nome vazio é barrado no serviço (ValidationError)
    customer_name: str = Field(max_length=140)
    customer_phone: Optional[str] = Field(default=None, max_length=20)
    description: Optional[str] = Field(default=None, max_length=255)

    items: List[CreditSaleItemIn] = Field(default_factory=list)
    # usado só quando não há itens (lançamento rápido)
    total: Optional[Decimal] = Field(default=None, ge=0, max_digits=12, decimal_places=2)

    installments: int = Field(default=1, ge=1, le=120)
    amount_paid: Decimal = Field(default=Decimal("0.00"), ge=0, max_digits=12, decimal_places=2)

    sale_date: Optional[datetime] = None
    charge_date: Optional[datetime] = None

    reminder_preferences: Optional[ReminderPreferences] = None
    notes: Optional[str] = None


class CreditSaleUpdate(CreditSaleCreate):
    # se não vierem, mantém o que já estava gravado
    amount_paid: Optional[Decimal] = Field(default=None, ge=0, max_digits=12, decimal_places=2)
    remaining_amount: Optional[Decimal] = Field(default=None, ge=0, max_digits=12, decimal_places=2)


class CreditSalePostpone(BaseModel):
    charge_date: datetime
    reminder_preferences: Optional[ReminderPreferences] = None
    notes: Optional[str] = None
    # reagendar para antes da cobrança atual precisa ser explícito
    allow_earlier: bool = False


class CreditSaleItemOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    position: int
    description: str
    quantity: int
    unit_price: Decimal
    total: Decimal


class CreditSaleOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    customer_name: str
    customer_phone: Optional[str]
    description: str
    items: List[CreditSaleItemOut]
    total: Decimal
    installments: int
    installment_value: Optional[Decimal]
    amount_paid: Decimal
    remaining_amount: Decimal
    sale_date: datetime
    charge_date: datetime
    status: CreditSaleStatus
    reminder_preferences: Optional[ReminderPreferences]
    notes: Optional[str]
    archived_at: Optional[datetime]
    deleted_at: Optional[datetime]


class CreditSalesSummaryOut(BaseModel):
    active_count: int
    overdue_count: int
    due_today_count: int
    upcoming_count: int
    outstanding_count: int
    outstanding_total: Decimal
    overdue_total: Decimal
    due_today_total: Decimal
    upcoming_total: Decimal
    average_ticket: Decimal
