"""Tests for Pydantic models."""

import pytest
from pydantic import ValidationError

from gerrit_monitor.models import Account, GerritInstance


class TestAccount:
    def test_from_gerrit_record(self):
        account = Account.model_validate({"_account_id": 1000, "name": "Olive", "email": "olive@example.com"})
        assert account.account_id == 1000
        assert account.name == "Olive"
        assert account.username is None

    def test_by_field_name(self):
        assert Account(account_id=1000) == Account.model_validate({"_account_id": 1000})

    def test_extra_fields_ignored(self):
        account = Account.model_validate({"_account_id": 1000, "avatars": [], "_more_accounts": True})
        assert account.account_id == 1000

    def test_missing_id(self):
        with pytest.raises(ValidationError):
            Account.model_validate({"name": "Nobody"})

    def test_to_json(self):
        assert Account(account_id=1000, name="Olive").to_json() == {"_account_id": 1000, "name": "Olive"}


class TestGerritInstance:
    def test_enabled_by_default(self):
        assert GerritInstance(host="https://gerrit.example.com", name="Example").enabled is True
