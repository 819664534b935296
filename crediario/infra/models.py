from __future__ import annotations

import enum
from datetime import datetime
from decimal import Decimal
from typing import Optional, List

from sqlalchemy import (
    String, Integer, DateTime, Numeric, ForeignKey, Text, JSON,
    Enum as SAEnum, Index, func
)

from sqlalchemy.orm import (
    DeclarativeBase, Mapped, mapped_column, relationship
)


# base
class Base(DeclarativeBase):
    pass

# enums = status
class CreditSaleStatus(str, enum.Enum):
    OPEN = "em_aberto"
    PAID = "paga"

class PaymentMethod(str, enum.Enum):
    CASH = "dinheiro"
    PIX = "pix"
    DEBIT_CARD = "cartao_debito"
    CREDIT_CARD = "cartao_credito"
    OTHER = "outros"

class TransactionType(str, enum.Enum):
    ENTRY = "entrada"
    EXIT = "saida"
    SALE = "venda"
    EXPENSE = "despesa"

def _values(e):
    return [m.value for m in e]

# tipo compartilhado entre transactions e credit_sale_payments
payment_method_type = SAEnum(PaymentMethod, name="payment_method", values_callable=_values)

# models
class CashSessionORM(Base):
    """
    sessão de caixa. aqui só interessa saber qual está aberta
    para marcar os pagamentos; abertura/fechamento ficam fora.
    """
    __tablename__ = "cash_sessions"
    __table_args__ = (
        Index("ix_cash_sessions_open", "is_open"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    initial_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=0)
    is_open: Mapped[bool] = mapped_column(nullable=False, default=True)

    opened_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    closed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    transactions: Mapped[List["TransactionORM"]] = relationship(back_populates="session")

class TransactionORM(Base):
    __tablename__ = "transactions"
    __table_args__ = (
        Index("ix_transactions_session", "session_id"),
        Index("ix_transactions_credit_sale", "credit_sale_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    session_id: Mapped[Optional[int]] = mapped_column(ForeignKey("cash_sessions.id"), nullable=True)

    type: Mapped[TransactionType] = mapped_column(
        SAEnum(TransactionType, name="transaction_type", values_callable=_values),
        nullable=False,
    )
    description: Mapped[str] = mapped_column(String(255), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    unit_price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    total: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)

    payment_method: Mapped[PaymentMethod] = mapped_column(
        payment_method_type,
        nullable=False,
    )
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # venda lançada no caixa que pertence a um crediário (só conta quando quitada)
    credit_sale_id: Mapped[Optional[int]] = mapped_column(ForeignKey("credit_sales.id"), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    deleted_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    session: Mapped[Optional["CashSessionORM"]] = relationship(back_populates="transactions")


class CreditSaleORM(Base):
    __tablename__ = "credit_sales"
    __table_args__ = (
        Index("ix_credit_sales_status", "status"),
        Index("ix_credit_sales_charge_date", "charge_date"),
        Index("ix_credit_sales_active", "deleted_at", "archived_at"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)

    customer_name: Mapped[str] = mapped_column(String(140), nullable=False)
    customer_phone: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    description: Mapped[str] = mapped_column(String(255), nullable=False)

    total: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    installments: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    installment_value: Mapped[Optional[Decimal]] = mapped_column(Numeric(12, 2), nullable=True)
    amount_paid: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=0)
    remaining_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)

    sale_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    # próxima cobrança (rolante, muda a cada pagamento parcial)
    charge_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    status: Mapped[CreditSaleStatus] = mapped_column(
        SAEnum(CreditSaleStatus, name="credit_sale_status", values_callable=_values),
        nullable=False,
        default=CreditSaleStatus.OPEN,
    )

    # {"enabled": bool, "days_before": int, "remind_at": "HH:MM" | None}
    reminder_preferences: Mapped[Optional[dict]] = mapped_column(JSON, nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    archived_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    deleted_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    # controle otimista de concorrência
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )

    __mapper_args__ = {"version_id_col": version}

    # relações
    items: Mapped[List["CreditSaleItemORM"]] = relationship(
        back_populates="credit_sale",
        cascade="all, delete-orphan",
        order_by="CreditSaleItemORM.position",
    )
    payments: Mapped[List["CreditSalePaymentORM"]] = relationship(back_populates="credit_sale")

class CreditSaleItemORM(Base):
    __tablename__ = "credit_sale_items"
    __table_args__ = (
        Index("ix_credit_sale_items_sale", "credit_sale_id", "position"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    credit_sale_id: Mapped[int] = mapped_column(ForeignKey("credit_sales.id"), nullable=False)

    position: Mapped[int] = mapped_column(Integer, nullable=False)  # 1..N
    description: Mapped[str] = mapped_column(String(255), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    unit_price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    total: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)

    credit_sale: Mapped["CreditSaleORM"] = relationship(back_populates="items")

class CreditSalePaymentORM(Base):
    """pagamento recebido; só inserção, nunca alterado nem apagado."""
    __tablename__ = "credit_sale_payments"
    __table_args__ = (
        Index("ix_credit_sale_payments_sale", "credit_sale_id", "payment_date"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    credit_sale_id: Mapped[int] = mapped_column(ForeignKey("credit_sales.id"), nullable=False)

    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    payment_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    payment_method: Mapped[PaymentMethod] = mapped_column(
        payment_method_type,
        nullable=False,
    )

    session_id: Mapped[Optional[int]] = mapped_column(ForeignKey("cash_sessions.id"), nullable=True)
    transaction_id: Mapped[Optional[int]] = mapped_column(ForeignKey("transactions.id"), nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )

    credit_sale: Mapped["CreditSaleORM"] = relationship(back_populates="payments")
