"""Unit tests for the credit ledger.

Run with: pytest tests/test_credit_ledger.py -v
"""

import pytest

from fakes import InMemoryUserStore, make_account
from webinars.domain import CreditPool, WebinarGroup
from webinars.domain.errors import (
    CreditNotApplicableError,
    InsufficientCreditError,
    UserNotFoundError,
    ValidationError,
)
from webinars.services.credit_ledger import CreditLedger, pool_for_group


class TestPoolForGroup:
    def test_master_class_and_pharmia_have_pools(self):
        assert pool_for_group(WebinarGroup.MASTER_CLASS) == CreditPool.MASTER_CLASS
        assert pool_for_group(WebinarGroup.PHARMIA) == CreditPool.PHARMIA

    def test_crop_tunis_has_no_pool(self):
        with pytest.raises(CreditNotApplicableError):
            pool_for_group(WebinarGroup.CROP_TUNIS)


class TestCreditLedger:
    def test_at_most_balance_debits_succeed(self):
        """With a balance of N, only N debits go through and the balance stops at zero."""
        account = make_account(pharmia_credits=3)
        users = InMemoryUserStore([account])
        ledger = CreditLedger(users)

        outcomes = []
        for _ in range(5):
            try:
                ledger.debit(account.id, CreditPool.PHARMIA)
                outcomes.append(True)
            except InsufficientCreditError:
                outcomes.append(False)

        assert outcomes == [True, True, True, False, False]
        assert users.get_user(account.id).pharmia_credits == 0

    def test_debit_touches_only_its_pool(self):
        account = make_account(master_class_credits=1, pharmia_credits=1)
        users = InMemoryUserStore([account])

        CreditLedger(users).debit(account.id, CreditPool.MASTER_CLASS)

        assert users.get_user(account.id).master_class_credits == 0
        assert users.get_user(account.id).pharmia_credits == 1

    def test_debit_more_than_balance(self):
        account = make_account(master_class_credits=2)
        users = InMemoryUserStore([account])

        with pytest.raises(InsufficientCreditError):
            CreditLedger(users).debit(account.id, CreditPool.MASTER_CLASS, amount=3)
        assert users.get_user(account.id).master_class_credits == 2

    def test_credit_adds(self):
        account = make_account()
        users = InMemoryUserStore([account])

        CreditLedger(users).credit(account.id, CreditPool.PHARMIA, 4)

        assert users.get_user(account.id).pharmia_credits == 4

    def test_credit_unknown_user(self):
        with pytest.raises(UserNotFoundError):
            CreditLedger(InMemoryUserStore()).credit(make_account().id, CreditPool.PHARMIA, 1)

    @pytest.mark.parametrize("amount", [0, -2])
    def test_amount_must_be_positive(self, amount):
        account = make_account(pharmia_credits=5)
        ledger = CreditLedger(InMemoryUserStore([account]))

        with pytest.raises(ValidationError):
            ledger.debit(account.id, CreditPool.PHARMIA, amount)
        with pytest.raises(ValidationError):
            ledger.credit(account.id, CreditPool.PHARMIA, amount)
