"""Balance aggregation: fold postings into per-account balances."""

from datetime import date
from decimal import Decimal
from typing import Callable, Iterable, Optional

from projectledger.database.base import Database
from projectledger.domain.entities import (
    Account,
    AccountBalance,
    AccountClass,
    Direction,
    Posting,
)

AccountFilter = Callable[[Account], bool]


def signed_amount(account_class: AccountClass, posting: Posting) -> Decimal:
    """Amount a posting adds to an account balance of the given class.

    Debits increase asset-side classes; credits increase liability, equity,
    revenue and expense classes.
    """
    if account_class.is_debit_normal:
        return posting.amount if posting.direction == Direction.DEBIT else -posting.amount
    return posting.amount if posting.direction == Direction.CREDIT else -posting.amount


def fold(
    accounts: Iterable[Account], postings: Iterable[Posting], as_of: date
) -> dict[str, AccountBalance]:
    """Fold postings dated on or before as_of into balances, keyed by code.

    Every account starts at zero. Postings against accounts not in ``accounts``
    are ignored. Contra-asset balances are always reported as non-positive.
    """
    by_code = {account.code: account for account in accounts}
    totals = {code: Decimal("0") for code in by_code}

    for posting in postings:
        if posting.date > as_of:
            continue
        account = by_code.get(posting.account_code)
        if account is None:
            continue
        totals[posting.account_code] += signed_amount(account.account_class, posting)

    balances = {}
    for code, account in by_code.items():
        balance = totals[code]
        if account.account_class == AccountClass.CONTRA_ASSET:
            balance = -abs(balance)
        balances[code] = AccountBalance(account=account, balance=balance)
    return balances


class BalanceAggregator:
    """Read-only service computing account balances as of a date."""

    def __init__(self, db: Database):
        """Initialize balance aggregator.

        Args:
            db: Database instance
        """
        self.db = db

    def aggregate(
        self, as_of: date, exclude: Optional[AccountFilter] = None
    ) -> dict[str, AccountBalance]:
        """Balances of every account as of a date.

        Args:
            as_of: Inclusive cutoff date
            exclude: Predicate selecting accounts to leave out

        Returns:
            Mapping of account code to balance, ordered by code
        """
        accounts = self.db.list_accounts()
        if exclude is not None:
            accounts = [account for account in accounts if not exclude(account)]
        return fold(accounts, self.db.list_postings(as_of=as_of), as_of)

    def balance_of(self, code: str, as_of: date) -> Decimal:
        """Balance of a single account, zero for unknown codes."""
        balance = self.aggregate(as_of).get(code)
        return balance.balance if balance is not None else Decimal("0")
