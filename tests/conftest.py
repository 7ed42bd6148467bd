"""
Shared test fixtures.

Sets up an isolated test database so tests never touch
the real database. Tables are created before and dropped
after every test, so no test data persists.
"""

import os

# Must be set before the application modules read their settings
os.environ.setdefault("DATABASE_URL", "sqlite:///./test.db")

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from ledger_recon.main import app
from ledger_recon.models import Account, Deposit, Transfer, Withdrawal
from ledger_recon.models.base import Base, get_db


# SQLite file database, no external server needed
TEST_DATABASE_URL = "sqlite:///./test.db"

engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
)

TestSessionLocal = sessionmaker(
    bind=engine,
    autocommit=False,
    autoflush=False,
)


@pytest.fixture(autouse=True)
def setup_database():
    """
    Create all tables before each test, drop them after.

    autouse=True means every test gets this automatically.
    This ensures each test starts with a clean database.
    """
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db_session():
    """Provide a database session for direct service testing."""
    session = TestSessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
def client(db_session):
    """
    Provide a test client with the test database.

    We override the get_db dependency so the FastAPI app
    uses our test session instead of the real database.
    """
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


# --- Source record factories ---
# Source rows are written straight to their tables, the way the
# workflows that own them post them. Each factory commits, because
# adapters read on their own sessions.

@pytest.fixture
def make_account(db_session):
    def _make(name="Main Cash", currency="AED", is_archived=False):
        account = Account(name=name, currency=currency, is_archived=is_archived)
        db_session.add(account)
        db_session.commit()
        return account
    return _make


@pytest.fixture
def add_row(db_session):
    """Commit any source row (or other model instance)."""
    def _add(row):
        db_session.add(row)
        db_session.commit()
        return row
    return _add


@pytest.fixture
def deposit(add_row):
    def _deposit(account, amount, when, currency=None, remarks="", by="cashier"):
        return add_row(Deposit(
            account_id=account.id,
            deposit_amount=Decimal(amount),
            currency=currency or account.currency,
            deposit_date=when,
            deposit_by=by,
            remarks=remarks,
        ))
    return _deposit


@pytest.fixture
def withdrawal(add_row):
    def _withdrawal(account, amount, when, currency=None, remarks="", by="cashier"):
        return add_row(Withdrawal(
            account_id=account.id,
            withdrawal_amount=Decimal(amount),
            currency=currency or account.currency,
            withdrawal_date=when,
            withdrawal_by=by,
            remarks=remarks,
        ))
    return _withdrawal


@pytest.fixture
def transfer(add_row):
    def _transfer(
        source, destination, amount, when,
        charges="0", rate="1", trx="", remarks="", by="cashier",
    ):
        return add_row(Transfer(
            from_account=source.id,
            to_account=destination.id,
            amount=Decimal(amount),
            charges=Decimal(charges),
            exchange_rate=Decimal(rate),
            transfer_date=when,
            trx=trx,
            remarks=remarks,
            added_by=by,
        ))
    return _transfer

