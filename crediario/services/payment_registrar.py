# crediario/services/payment_registrar.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional

from crediario.config import RECORD_CASH_ENTRY
from crediario.infra.models import CreditSaleORM, CreditSalePaymentORM, PaymentMethod
from crediario.infra.repositories import CreditSaleRepository
from crediario.services import money
from crediario.services.cash import CashLedger, CashSessionProvider, payment_entry_description
from crediario.services.credit_sale_ledger import CreditSaleLedger
from crediario.services.dates import now_utc, parse_datetime
from crediario.services.errors import (
    AlreadySettledError,
    OverpaymentError,
    ValidationError,
)

logger = logging.getLogger(__name__)


@dataclass
class PaymentRegistration:
    """
    resultado da baixa. `sale` é o retrato logo após a atualização
    (é com ele que o recibo é montado, não com uma releitura).
    """
    payment: CreditSalePaymentORM
    sale: CreditSaleORM
    ledger_entry_id: Optional[int] = None
    ledger_warning: bool = False


class PaymentRegistrar:
    def __init__(
        self,
        ledger: CreditSaleLedger,
        repo: CreditSaleRepository,
        *,
        cash_ledger: Optional[CashLedger] = None,
        sessions: Optional[CashSessionProvider] = None,
        record_cash_entry: bool = RECORD_CASH_ENTRY,
    ):
        self.ledger = ledger
        self.repo = repo
        self.cash_ledger = cash_ledger
        self.sessions = sessions
        self.record_cash_entry = record_cash_entry

    def register_payment(
        self,
        sale_id: int,
        *,
        amount: Decimal,
        payment_method: PaymentMethod,
        payment_date: Optional[datetime] = None,
        session_id: Optional[int] = None,
        notes: Optional[str] = None,
        record_cash_entry: Optional[bool] = None,
    ) -> PaymentRegistration:
        """
        baixa um pagamento numa venda a prazo.
        rules:
          - valor > 0
          - venda precisa existir e não estar na lixeira
          - venda quitada não recebe pagamento
          - valor acima do restante é recusado (não é ajustado)
          - falha no lançamento do caixa não derruba o pagamento
        """
        raw = money.to_decimal(amount)
        if not raw.is_finite():
            raise ValidationError("Valor do pagamento inválido.")
        try:
            amount = money.round2(raw)
        except ValidationError:
            # grande demais para centavos: vira excesso sobre o restante
            amount = raw
        if amount <= 0:
            raise ValidationError("O valor do pagamento deve ser maior que zero.")

        paid_at = parse_datetime(payment_date) if payment_date is not None else now_utc()
        if paid_at is None:
            raise ValidationError("Data de pagamento inválida.")

        # leitura com lock: checagem de saldo e gravação na mesma transação
        sale = self.ledger.get(sale_id, for_update=True)

        remaining = sale.remaining_amount if sale.remaining_amount is not None else sale.total
        remaining = money.round2(remaining)
        if remaining <= 0:
            raise AlreadySettledError("Venda a prazo já está quitada.")
        if amount > remaining:
            raise OverpaymentError(amount, remaining)

        if session_id is None and self.sessions is not None:
            session_id = self.sessions.get_current_session_id()

        ledger_entry_id: Optional[int] = None
        ledger_warning = False
        should_record = self.record_cash_entry if record_cash_entry is None else record_cash_entry
        if should_record and self.cash_ledger is not None:
            try:
                ledger_entry_id = self.cash_ledger.append_entry(
                    description=payment_entry_description(sale.description),
                    amount=amount,
                    payment_method=payment_method,
                    created_at=paid_at,
                    session_id=session_id,
                    notes=notes,
                )
            except Exception as e:
                # perder o vínculo com o caixa é aceitável; perder o pagamento não
                ledger_warning = True
                logger.warning(
                    "cash entry failed for credit sale id=%s amount=%s: %s",
                    sale.id, amount, e,
                )

        payment = CreditSalePaymentORM(
            credit_sale_id=sale.id,
            amount=amount,
            payment_date=paid_at,
            payment_method=payment_method,
            session_id=session_id,
            transaction_id=ledger_entry_id,
            notes=notes,
        )
        self.repo.add_payment(payment)

        self.ledger.apply_payment(sale, amount)

        logger.info(
            "payment registered sale_id=%s payment_id=%s amount=%s remaining=%s status=%s",
            sale.id, payment.id, amount, sale.remaining_amount, sale.status.value,
        )
        return PaymentRegistration(
            payment=payment,
            sale=sale,
            ledger_entry_id=ledger_entry_id,
            ledger_warning=ledger_warning,
        )
