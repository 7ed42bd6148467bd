"""
Tests for the AccountService.
"""

import pytest

from ledger_recon.schemas.account import AccountCreate
from ledger_recon.services.account_service import AccountService
from ledger_recon.services.exceptions import AccountNotFound, ValidationError


def create(service, name="Main Cash", currency="AED"):
    return service.create_account(AccountCreate(name=name, currency=currency))


class TestCreateAccount:

    def test_create_account_succeeds(self, db_session):
        service = AccountService(db_session)
        account = create(service)
        db_session.commit()

        assert account.id is not None
        assert account.name == "Main Cash"
        assert account.is_archived is False

    def test_currency_is_upper_cased(self, db_session):
        account = create(AccountService(db_session), currency="usd")
        assert account.currency == "USD"

    def test_duplicate_name_rejected(self, db_session):
        service = AccountService(db_session)
        create(service)
        db_session.commit()

        with pytest.raises(ValidationError, match="already exists"):
            create(service)

    def test_blank_name_rejected(self):
        with pytest.raises(ValueError):
            AccountCreate(name="   ", currency="AED")

    def test_numeric_currency_rejected(self):
        with pytest.raises(ValueError):
            AccountCreate(name="Till", currency="123")


class TestArchiveAccount:

    def test_archive_sets_flag_and_timestamp(self, db_session):
        service = AccountService(db_session)
        account = create(service)
        db_session.commit()

        archived = service.archive_account(account.id)

        assert archived.is_archived is True
        assert archived.archived_at is not None

    def test_archive_twice_rejected(self, db_session):
        service = AccountService(db_session)
        account = create(service)
        service.archive_account(account.id)
        db_session.commit()

        with pytest.raises(ValidationError, match="already archived"):
            service.archive_account(account.id)

    def test_archived_account_cannot_take_postings(self, db_session):
        service = AccountService(db_session)
        account = create(service)
        service.archive_account(account.id)

        with pytest.raises(ValidationError, match="archived"):
            service.get_active_account(account.id)


class TestListAccounts:

    def test_archived_hidden_by_default(self, db_session):
        service = AccountService(db_session)
        create(service, "Bank")
        till = create(service, "Till")
        service.archive_account(till.id)
        db_session.commit()

        assert [a.name for a in service.list_accounts()] == ["Bank"]
        assert [a.name for a in service.list_accounts(include_archived=True)] == [
            "Bank", "Till",
        ]

    def test_get_unknown_account(self, db_session):
        with pytest.raises(AccountNotFound):
            AccountService(db_session).get_account(404)
