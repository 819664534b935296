# crediario/services/credit_sale_ledger.py
from __future__ import annotations

import logging
from datetime import datetime
from decimal import Decimal
from typing import List, Optional, Sequence

from crediario.config import DEFAULT_INTERVAL_DAYS
from crediario.infra.models import (
    CreditSaleItemORM,
    CreditSaleORM,
    CreditSalePaymentORM,
    CreditSaleStatus,
)
from crediario.infra.repositories import CreditSaleRepository
from crediario.schemas.credit_sales import (
    CreditSaleCreate,
    CreditSaleItemIn,
    CreditSaleUpdate,
    ReminderPreferences,
)
from crediario.services import money
from crediario.services.dates import as_utc, now_utc, parse_datetime, start_of_day
from crediario.services.errors import AlreadySettledError, NotFoundError, ValidationError
from crediario.services.interval_estimator import estimate_interval_days, project_next_charge_date

logger = logging.getLogger(__name__)


# helpers
def derive_status(remaining: Decimal) -> CreditSaleStatus:
    return CreditSaleStatus.PAID if remaining <= 0 else CreditSaleStatus.OPEN


def _summarize_items(items: Sequence[CreditSaleItemIn]) -> str:
    first = items[0].description.strip()
    extra = len(items) - 1
    if extra <= 0:
        return first
    return f"{first} + {extra} item(s)"


def _build_items(items: Sequence[CreditSaleItemIn]) -> List[CreditSaleItemORM]:
    return [
        CreditSaleItemORM(
            position=n,
            description=item.description.strip(),
            quantity=item.quantity,
            unit_price=money.round2(item.unit_price),
            total=money.line_total(item.quantity, item.unit_price, item.total),
        )
        for n, item in enumerate(items, start=1)
    ]


def _reminder_dict(prefs: Optional[ReminderPreferences]) -> Optional[dict]:
    return prefs.model_dump() if prefs is not None else None


class CreditSaleLedger:
    """
    ciclo de vida da venda a prazo:
    criação, baixa de pagamentos, saldo/status, adiamento, arquivo e lixeira.

    status nunca é definido pelo chamador: sai sempre do saldo restante.
    """

    def __init__(self, repo: CreditSaleRepository, *, default_interval_days: int = DEFAULT_INTERVAL_DAYS):
        self.repo = repo
        self.default_interval_days = default_interval_days

    # leitura
    def get(self, sale_id: int, *, for_update: bool = False) -> CreditSaleORM:
        sale = self.repo.get(sale_id, for_update=for_update)
        if not sale:
            raise NotFoundError("Venda a prazo não encontrada.")
        return sale

    def list_active(self) -> List[CreditSaleORM]:
        return self.repo.list_active()

    def list_by_settlement(
        self, status: CreditSaleStatus, *, include_archived: bool = False
    ) -> List[CreditSaleORM]:
        return self.repo.list_by_status(status, include_archived=include_archived)

    def list_deleted(self) -> List[CreditSaleORM]:
        return self.repo.list_deleted()

    def get_payments_for_sale(self, sale_id: int) -> List[CreditSalePaymentORM]:
        # vale também para vendas na lixeira (reimpressão/auditoria)
        if not self.repo.get(sale_id, include_deleted=True):
            raise NotFoundError("Venda a prazo não encontrada.")
        return self.repo.list_payments(sale_id)

    # cálculo comum a create/update
    def _compute(self, data: CreditSaleCreate, *, amount_paid: Decimal, remaining: Optional[Decimal]):
        name = (data.customer_name or "").strip()
        if not name:
            raise ValidationError("Nome do cliente é obrigatório.")

        items_total = money.items_total(
            money.line_total(i.quantity, i.unit_price, i.total) for i in data.items
        )
        if items_total is not None:
            total = items_total
        elif data.total is not None and data.total > 0:
            total = money.round2(data.total)
        else:
            raise ValidationError("Informe ao menos um item ou um total maior que zero.")

        description = (data.description or "").strip()
        if not description:
            if not data.items:
                raise ValidationError("Descrição é obrigatória quando não há itens.")
            description = _summarize_items(data.items)

        charge_date = parse_datetime(data.charge_date)
        if charge_date is None:
            raise ValidationError("Data de cobrança inválida.")

        if data.installments < 1:
            raise ValidationError("installments deve ser >= 1.")

        amount_paid = money.round2(amount_paid)
        if amount_paid < 0:
            raise ValidationError("amount_paid não pode ser negativo.")
        if amount_paid > total:
            raise ValidationError("amount_paid não pode ser maior que o total.")

        if remaining is None:
            remaining = money.remaining_amount(total, amount_paid)
        else:
            remaining = money.round2(remaining)
            if remaining != money.remaining_amount(total, amount_paid):
                raise ValidationError("remaining_amount não confere com total - amount_paid.")

        return {
            "customer_name": name,
            "customer_phone": (data.customer_phone or "").strip() or None,
            "description": description,
            "total": total,
            "installments": data.installments,
            "installment_value": money.installment_value(total, data.installments),
            "amount_paid": amount_paid,
            "remaining_amount": remaining,
            "status": derive_status(remaining),
            "charge_date": charge_date,
            "reminder_preferences": _reminder_dict(data.reminder_preferences),
            "notes": data.notes,
        }

    # use cases
    def create(self, data: CreditSaleCreate) -> CreditSaleORM:
        fields = self._compute(data, amount_paid=data.amount_paid, remaining=None)
        sale_date = parse_datetime(data.sale_date) or now_utc()

        sale = CreditSaleORM(
            **fields,
            sale_date=sale_date,
            items=_build_items(data.items),
            archived_at=None,
            deleted_at=None,
        )
        self.repo.add(sale)
        logger.info(
            "credit sale created id=%s total=%s installments=%s status=%s",
            sale.id, sale.total, sale.installments, sale.status.value,
        )
        return sale

    def update(self, sale_id: int, data: CreditSaleUpdate) -> CreditSaleORM:
        """
        recalcula a venda com os dados novos. não processa pagamento:
        amount_paid/remaining_amount vêm do chamador (ou do estado atual).
        """
        sale = self.get(sale_id, for_update=True)

        amount_paid = data.amount_paid if data.amount_paid is not None else sale.amount_paid
        fields = self._compute(data, amount_paid=amount_paid, remaining=data.remaining_amount)

        for k, v in fields.items():
            setattr(sale, k, v)
        # sale_date é imutável
        sale.items = _build_items(data.items)

        self.repo.save(sale)
        logger.info("credit sale updated id=%s total=%s status=%s", sale.id, sale.total, sale.status.value)
        return sale

    def apply_payment(self, sale: CreditSaleORM, amount: Decimal) -> CreditSaleORM:
        """
        recalcula pago/restante/status após um pagamento já validado.
        se continua em aberto, a cobrança anda pelo intervalo estimado;
        se quitou, a data de cobrança fica como está.
        """
        amount_paid_before = money.round2(sale.amount_paid)
        new_amount_paid = money.round2(amount_paid_before + money.round2(amount))
        new_remaining = money.remaining_amount(sale.total, new_amount_paid)

        if new_remaining > 0:
            # classifica parcelas pagas com o valor ANTES deste pagamento
            interval = estimate_interval_days(
                sale_date=sale.sale_date,
                charge_date=sale.charge_date,
                total=sale.total,
                installments=sale.installments,
                installment_value=sale.installment_value,
                amount_paid=amount_paid_before,
            )
            sale.charge_date = project_next_charge_date(
                as_utc(sale.charge_date), interval, self.default_interval_days
            )

        sale.amount_paid = new_amount_paid
        sale.remaining_amount = new_remaining
        sale.status = derive_status(new_remaining)

        self.repo.save(sale)
        return sale

    def postpone(
        self,
        sale_id: int,
        *,
        charge_date: datetime,
        reminder_preferences: Optional[ReminderPreferences] = None,
        notes: Optional[str] = None,
        allow_earlier: bool = False,
    ) -> CreditSaleORM:
        sale = self.get(sale_id, for_update=True)

        if sale.remaining_amount <= 0:
            raise AlreadySettledError("Venda já quitada não pode ser reagendada.")

        new_date = parse_datetime(charge_date)
        if new_date is None:
            raise ValidationError("Data de cobrança inválida.")
        # compara por dia: "2026-03-10" não é anterior a 2026-03-10T12:00
        if start_of_day(new_date) < start_of_day(as_utc(sale.charge_date)) and not allow_earlier:
            raise ValidationError(
                "Nova data de cobrança é anterior à atual (use allow_earlier para antecipar)."
            )

        sale.charge_date = new_date
        sale.status = CreditSaleStatus.OPEN
        sale.archived_at = None
        if reminder_preferences is not None:
            sale.reminder_preferences = _reminder_dict(reminder_preferences)
        if notes is not None:
            sale.notes = notes

        self.repo.save(sale)
        logger.info("credit sale postponed id=%s charge_date=%s", sale.id, new_date.isoformat())
        return sale

    def archive(self, sale_id: int) -> CreditSaleORM:
        sale = self.get(sale_id)
        # idempotente: mantém o primeiro carimbo
        if sale.archived_at is None:
            sale.archived_at = now_utc()
            self.repo.save(sale)
            logger.info("credit sale archived id=%s", sale.id)
        return sale

    def unarchive(self, sale_id: int) -> CreditSaleORM:
        sale = self.get(sale_id)
        if sale.archived_at is not None:
            sale.archived_at = None
            self.repo.save(sale)
            logger.info("credit sale unarchived id=%s", sale.id)
        return sale

    def remove(self, sale_id: int) -> CreditSaleORM:
        sale = self.get(sale_id)
        sale.deleted_at = now_utc()
        self.repo.save(sale)
        logger.info("credit sale moved to trash id=%s", sale.id)
        return sale

    def restore(self, sale_id: int) -> CreditSaleORM:
        sale = self.repo.get(sale_id, include_deleted=True)
        if not sale:
            raise NotFoundError("Venda a prazo não encontrada.")
        if sale.deleted_at is not None:
            sale.deleted_at = None
            self.repo.save(sale)
            logger.info("credit sale restored from trash id=%s", sale.id)
        return sale
