"""Credit ledger: two non-negative balances per user.

Balances are the only persisted state; there is no transaction history.
"""

import logging

from webinars.domain import CreditPool, UserId, WebinarGroup
from webinars.domain.enums import GROUP_CREDIT_POOLS
from webinars.domain.errors import (
    CreditNotApplicableError,
    InsufficientCreditError,
    UserNotFoundError,
    ValidationError,
)
from webinars.stores.interfaces import UserStore

logger = logging.getLogger(__name__)


def pool_for_group(group: WebinarGroup) -> CreditPool:
    """Return the credit pool that pays for a webinar group.

    Raises:
        CreditNotApplicableError: If the group cannot be paid with credits.
    """
    try:
        return GROUP_CREDIT_POOLS[group]
    except KeyError:
        raise CreditNotApplicableError() from None


class CreditLedger:
    def __init__(self, users: UserStore) -> None:
        self._users = users

    def debit(self, user_id: UserId, pool: CreditPool, amount: int = 1) -> None:
        """Take credits if the balance covers them, in a single conditional write.

        Raises:
            InsufficientCreditError: If the balance was below amount at write time.
        """
        if amount < 1:
            raise ValidationError("Le montant doit être positif.")
        if not self._users.decrement_credits(user_id, pool, amount):
            logger.info("Credit debit refused for user %s on %s", user_id, pool)
            raise InsufficientCreditError()
        logger.info("Debited %d %s credit(s) from user %s", amount, pool, user_id)

    def credit(self, user_id: UserId, pool: CreditPool, amount: int) -> None:
        """Add credits. Used for admin top-ups and refunds.

        Raises:
            UserNotFoundError: If the user does not exist.
        """
        if amount < 1:
            raise ValidationError("Le montant doit être positif.")
        if not self._users.increment_credits(user_id, pool, amount):
            raise UserNotFoundError()
        logger.info("Credited %d %s credit(s) to user %s", amount, pool, user_id)
