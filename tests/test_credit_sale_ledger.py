from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

import pytest

from crediario.infra.models import CreditSaleStatus, PaymentMethod
from crediario.schemas.credit_sales import CreditSaleCreate, CreditSaleUpdate, ReminderPreferences
from crediario.services.dates import as_utc
from crediario.services.errors import AlreadySettledError, NotFoundError, ValidationError


def test_create_computes_installment_value_and_status(make_sale):
    sale = make_sale()

    assert sale.id is not None
    assert sale.total == Decimal("300.00")
    assert sale.installment_value == Decimal("100.00")
    assert sale.amount_paid == Decimal("0.00")
    assert sale.remaining_amount == Decimal("300.00")
    assert sale.status == CreditSaleStatus.OPEN
    assert sale.archived_at is None
    assert sale.deleted_at is None


def test_create_single_installment_has_no_installment_value(make_sale):
    sale = make_sale(installments=1)
    assert sale.installment_value is None


def test_total_comes_from_items(make_sale, item):
    sale = make_sale(
        description=None,
        total=Decimal("999.00"),
        items=[
            item("Camiseta", 3, "19.90"),
            item("Boné", 1, "25.00", total="20.00"),
        ],
    )

    assert sale.total == Decimal("79.70")
    assert [i.total for i in sale.items] == [Decimal("59.70"), Decimal("20.00")]
    assert [i.position for i in sale.items] == [1, 2]
    assert sale.description == "Camiseta + 1 item(s)"


def test_initial_amount_paid_is_carried(make_sale):
    sale = make_sale(amount_paid=Decimal("300.00"))
    assert sale.remaining_amount == Decimal("0.00")
    assert sale.status == CreditSaleStatus.PAID


@pytest.mark.parametrize(
    "overrides",
    [
        {"customer_name": "   "},
        {"total": None},
        {"total": Decimal("0")},
        {"charge_date": None},
        {"description": None},
        {"amount_paid": Decimal("300.01")},
    ],
)
def test_create_rejects_invalid_input(make_sale, overrides):
    with pytest.raises(ValidationError):
        make_sale(**overrides)


def test_update_recomputes_and_keeps_payments(ledger, make_sale):
    sale = make_sale(amount_paid=Decimal("50.00"))
    original_sale_date = sale.sale_date

    updated = ledger.update(
        sale.id,
        CreditSaleUpdate(
            customer_name="Maria S.",
            description="Geladeira 2 portas",
            total=Decimal("400.00"),
            installments=4,
            charge_date=sale.charge_date,
            sale_date=datetime(2030, 1, 1, tzinfo=timezone.utc),
        ),
    )

    assert updated.customer_name == "Maria S."
    assert updated.total == Decimal("400.00")
    assert updated.installment_value == Decimal("100.00")
    assert updated.amount_paid == Decimal("50.00")
    assert updated.remaining_amount == Decimal("350.00")
    assert updated.sale_date == original_sale_date


def test_update_rejects_inconsistent_remaining(ledger, make_sale):
    sale = make_sale()
    with pytest.raises(ValidationError):
        ledger.update(
            sale.id,
            CreditSaleUpdate(
                customer_name="Maria",
                description="Geladeira",
                total=Decimal("300.00"),
                charge_date=sale.charge_date,
                amount_paid=Decimal("100.00"),
                remaining_amount=Decimal("150.00"),
            ),
        )


def test_update_unknown_sale(ledger):
    with pytest.raises(NotFoundError):
        ledger.update(
            999,
            CreditSaleUpdate(
                customer_name="X",
                description="Y",
                total=Decimal("1.00"),
                charge_date=datetime(2026, 1, 1, tzinfo=timezone.utc),
            ),
        )


def test_postpone_moves_charge_date_and_keeps_balance(ledger, make_sale):
    sale = make_sale(amount_paid=Decimal("100.00"))
    new_date = as_utc(sale.charge_date) + timedelta(days=10)

    postponed = ledger.postpone(
        sale.id,
        charge_date=new_date,
        reminder_preferences=ReminderPreferences(days_before=2, remind_at="09:00"),
        notes="cliente pediu mais prazo",
    )

    assert as_utc(postponed.charge_date) == new_date
    assert postponed.amount_paid == Decimal("100.00")
    assert postponed.remaining_amount == Decimal("200.00")
    assert postponed.status == CreditSaleStatus.OPEN
    assert postponed.reminder_preferences == {"enabled": True, "days_before": 2, "remind_at": "09:00"}
    assert postponed.notes == "cliente pediu mais prazo"


def test_postpone_clears_archive(ledger, make_sale):
    sale = make_sale()
    ledger.archive(sale.id)

    postponed = ledger.postpone(sale.id, charge_date=as_utc(sale.charge_date) + timedelta(days=1))
    assert postponed.archived_at is None


def test_postpone_to_earlier_date_needs_explicit_flag(ledger, make_sale):
    sale = make_sale()
    earlier = as_utc(sale.charge_date) - timedelta(days=5)

    with pytest.raises(ValidationError):
        ledger.postpone(sale.id, charge_date=earlier)

    moved = ledger.postpone(sale.id, charge_date=earlier, allow_earlier=True)
    assert as_utc(moved.charge_date) == earlier


def test_postpone_paid_sale_is_rejected(ledger, make_sale):
    sale = make_sale(amount_paid=Decimal("300.00"))
    with pytest.raises(AlreadySettledError):
        ledger.postpone(sale.id, charge_date=as_utc(sale.charge_date) + timedelta(days=30))
    assert sale.status == CreditSaleStatus.PAID


def test_archive_is_idempotent(ledger, make_sale):
    sale = make_sale()

    first = ledger.archive(sale.id).archived_at
    second = ledger.archive(sale.id).archived_at

    assert first is not None
    assert second == first
    assert ledger.list_active() == []


def test_unarchive_returns_sale_to_active_list(ledger, make_sale):
    sale = make_sale()
    ledger.archive(sale.id)
    ledger.unarchive(sale.id)
    assert [s.id for s in ledger.list_active()] == [sale.id]


def test_remove_hides_sale_but_keeps_payments(ledger, registrar, make_sale):
    sale = make_sale()
    registrar.register_payment(sale.id, amount=Decimal("50.00"), payment_method=PaymentMethod.PIX)

    ledger.remove(sale.id)

    assert ledger.list_active() == []
    assert ledger.list_by_settlement(CreditSaleStatus.OPEN) == []
    assert [s.id for s in ledger.list_deleted()] == [sale.id]
    with pytest.raises(NotFoundError):
        ledger.get(sale.id)
    with pytest.raises(NotFoundError):
        ledger.postpone(sale.id, charge_date=as_utc(sale.charge_date) + timedelta(days=1))

    payments = ledger.get_payments_for_sale(sale.id)
    assert [p.amount for p in payments] == [Decimal("50.00")]


def test_restore_brings_sale_back(ledger, make_sale):
    sale = make_sale()
    ledger.remove(sale.id)
    restored = ledger.restore(sale.id)

    assert restored.deleted_at is None
    assert [s.id for s in ledger.list_active()] == [sale.id]


def test_list_by_settlement(ledger, make_sale):
    open_sale = make_sale()
    paid_sale = make_sale(amount_paid=Decimal("300.00"))

    assert [s.id for s in ledger.list_by_settlement(CreditSaleStatus.OPEN)] == [open_sale.id]
    assert [s.id for s in ledger.list_by_settlement(CreditSaleStatus.PAID)] == [paid_sale.id]

    ledger.archive(paid_sale.id)
    assert ledger.list_by_settlement(CreditSaleStatus.PAID) == []
    assert [
        s.id for s in ledger.list_by_settlement(CreditSaleStatus.PAID, include_archived=True)
    ] == [paid_sale.id]


def test_active_list_is_ordered_by_charge_date(ledger, make_sale):
    later = make_sale(charge_date=datetime(2026, 3, 1, tzinfo=timezone.utc))
    sooner = make_sale(charge_date=datetime(2026, 2, 1, tzinfo=timezone.utc))

    assert [s.id for s in ledger.list_active()] == [sooner.id, later.id]


def test_payments_for_unknown_sale(ledger):
    with pytest.raises(NotFoundError):
        ledger.get_payments_for_sale(12345)


def test_create_accepts_quick_entry_without_items(ledger):
    sale = ledger.create(
        CreditSaleCreate(
            customer_name="João",
            description="Conserto",
            total=Decimal("80.5"),
            charge_date=datetime(2026, 2, 1, tzinfo=timezone.utc),
        )
    )
    assert sale.total == Decimal("80.50")
    assert sale.items == []
    assert sale.installments == 1


def test_postpone_date_only_on_same_day_is_not_earlier(ledger, make_sale):
    # vence 2026-02-01T12:00; "2026-02-01" vira meia-noite do mesmo dia
    sale = make_sale()

    moved = ledger.postpone(sale.id, charge_date=date(2026, 2, 1))
    assert as_utc(moved.charge_date) == datetime(2026, 2, 1, tzinfo=timezone.utc)

    with pytest.raises(ValidationError):
        ledger.postpone(sale.id, charge_date=date(2026, 1, 31))


def test_create_rejects_total_too_large_for_cents(ledger):
    with pytest.raises(ValidationError):
        ledger.create(
            CreditSaleCreate.model_construct(
                customer_name="João",
                description="Conserto",
                items=[],
                total=Decimal("1e30"),
                installments=1,
                amount_paid=Decimal("0.00"),
                charge_date=datetime(2026, 2, 1, tzinfo=timezone.utc),
                reminder_preferences=None,
                notes=None,
            )
        )
