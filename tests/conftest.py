from __future__ import annotations

import os

# a app cria as tabelas no startup; não deixar cair num arquivo local
os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")

from datetime import datetime, timezone
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from crediario.main import app
from crediario.infra.db import enable_sqlite_savepoints, get_db
from crediario.infra.models import Base, CashSessionORM
from crediario.infra.repositories import SqlCreditSaleRepository
from crediario.schemas.credit_sales import CreditSaleCreate, CreditSaleItemIn
from crediario.services.cash import SqlCashLedger, SqlCashSessionProvider
from crediario.services.credit_sale_ledger import CreditSaleLedger
from crediario.services.payment_registrar import PaymentRegistrar


@pytest.fixture()
def engine():
    """
    Banco de teste em SQLite em memória.
    - Rápido
    - Isolado (um banco por teste)
    - SAVEPOINT funcionando (lançamento do caixa usa begin_nested)
    """
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    enable_sqlite_savepoints(engine)
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def db_session(engine):
    TestingSessionLocal = sessionmaker(
        bind=engine,
        autoflush=False,
        autocommit=False,
        expire_on_commit=False,
        future=True,
    )
    session = TestingSessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


@pytest.fixture()
def repo(db_session):
    return SqlCreditSaleRepository(db_session)


@pytest.fixture()
def ledger(repo):
    return CreditSaleLedger(repo)


@pytest.fixture()
def registrar(db_session, ledger, repo):
    return PaymentRegistrar(
        ledger,
        repo,
        cash_ledger=SqlCashLedger(db_session),
        sessions=SqlCashSessionProvider(db_session),
        record_cash_entry=True,
    )


@pytest.fixture()
def open_session(db_session):
    cash = CashSessionORM(initial_amount=Decimal("100.00"), is_open=True)
    db_session.add(cash)
    db_session.flush()
    return cash


@pytest.fixture()
def make_sale(ledger):
    def _make(**overrides):
        data = {
            "customer_name": "Maria Souza",
            "customer_phone": "83987157461",
            "description": "Geladeira",
            "total": Decimal("300.00"),
            "installments": 3,
            "sale_date": datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc),
            "charge_date": datetime(2026, 2, 1, 12, 0, tzinfo=timezone.utc),
        }
        data.update(overrides)
        return ledger.create(CreditSaleCreate(**data))

    return _make


@pytest.fixture()
def item():
    def _item(description="Camiseta", quantity=1, unit_price="10.00", total=None):
        return CreditSaleItemIn(
            description=description,
            quantity=quantity,
            unit_price=Decimal(unit_price),
            total=Decimal(total) if total is not None else None,
        )

    return _item


@pytest.fixture()
def client(db_session):
    # override do get_db para usar SQLite em memória nos testes
    def _override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = _override_get_db

    with TestClient(app) as c:
        yield c

    app.dependency_overrides.clear()
