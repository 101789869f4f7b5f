"""Shared test fixtures."""

import pytest

from factories import OWNER_ID, REVIEWER_ID
from gerrit_monitor.models import Account


@pytest.fixture
def owner() -> Account:
    return Account(account_id=OWNER_ID, name="Olive Owner")


@pytest.fixture
def reviewer() -> Account:
    return Account(account_id=REVIEWER_ID, name="Rae Reviewer")
