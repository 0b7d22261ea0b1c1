"""Chart-of-accounts domain service."""

import logging
import re
from typing import Optional, Union

from projectledger.config import LedgerConfig
from projectledger.database.base import Database
from projectledger.domain.chart import DEFAULT_CHART_OF_ACCOUNTS, PostingMap, chart_entry_flags
from projectledger.domain.entities import Account as AccountEntity, AccountClass
from projectledger.domain.errors import (
    ConflictError,
    DependencyError,
    NotFoundError,
    ReferentialIntegrityError,
    ValidationError,
    account_delete_blocked,
    account_not_found,
    missing_accounts,
)

logger = logging.getLogger(__name__)

ACCOUNT_CODE_PATTERN = re.compile(r"^\d{4}$")


def parse_account_class(value: Union[str, AccountClass]) -> AccountClass:
    """Convert a class name (case-insensitive) to AccountClass.

    Raises:
        ValidationError: If the value is not a known class
    """
    if isinstance(value, AccountClass):
        return value
    normalized = str(value).strip().lower()
    for account_class in AccountClass:
        if account_class.value.lower() == normalized:
            return account_class
    known = ", ".join(c.value for c in AccountClass)
    raise ValidationError(f"Unknown account class '{value}'. Expected one of: {known}")


class AccountService:
    """Service for managing the chart of accounts."""

    def __init__(self, db: Database):
        """Initialize account service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_account(
        self,
        code: str,
        name: str,
        account_class: Union[str, AccountClass],
        category: Optional[str] = None,
        subcategory: Optional[str] = None,
        is_current_asset: Optional[bool] = None,
        is_current_liability: Optional[bool] = None,
    ) -> str:
        """Create a new account.

        Args:
            code: Four-digit account code
            name: Display name
            account_class: Account class or its name
            category: Balance-sheet grouping label
            subcategory: Balance-sheet sub-grouping label
            is_current_asset: Current flag for asset accounts (None means current)
            is_current_liability: Current flag for liability accounts (None means current)

        Returns:
            Account code

        Raises:
            ValidationError: If the code or class is malformed
            ConflictError: If the code already exists
        """
        code = code.strip()
        if not ACCOUNT_CODE_PATTERN.match(code):
            raise ValidationError(f"Invalid account code '{code}': expected four digits")
        if not name or not name.strip():
            raise ValidationError("Account name must not be empty")
        account_class = parse_account_class(account_class)

        if self.db.get_account(code) is not None:
            raise ConflictError(f"Account with code '{code}' already exists")

        return self.db.create_account(
            code=code,
            name=name.strip(),
            account_class=account_class,
            category=category,
            subcategory=subcategory,
            is_current_asset=is_current_asset,
            is_current_liability=is_current_liability,
        )

    def get_account(self, code: str) -> Optional[AccountEntity]:
        """Get account by code.

        Returns:
            Account entity or None if not found
        """
        return self.db.get_account(code)

    def list_accounts(self, account_class: Union[str, AccountClass, None] = None) -> list[AccountEntity]:
        """List accounts ordered by code, optionally of one class."""
        if account_class is not None:
            account_class = parse_account_class(account_class)
        return self.db.list_accounts(account_class=account_class)

    def update_account(
        self,
        code: str,
        name: Optional[str] = None,
        category: Optional[str] = None,
        subcategory: Optional[str] = None,
        is_current_asset: Optional[bool] = None,
        is_current_liability: Optional[bool] = None,
    ) -> None:
        """Update account labels and flags.

        The class is not editable; reports assume it never changes once
        postings reference the account.

        Raises:
            NotFoundError: If the account does not exist
        """
        if self.db.get_account(code) is None:
            raise NotFoundError(account_not_found(code))
        self.db.update_account(
            code,
            name=name,
            category=category,
            subcategory=subcategory,
            is_current_asset=is_current_asset,
            is_current_liability=is_current_liability,
        )

    def delete_account(self, code: str) -> None:
        """Delete an account.

        Raises:
            NotFoundError: If the account does not exist
            DependencyError: If postings reference the account
        """
        if self.db.get_account(code) is None:
            raise NotFoundError(account_not_found(code))

        posting_count = self.db.count_account_postings(code)
        if posting_count > 0:
            raise DependencyError(account_delete_blocked(code, posting_count))

        self.db.delete_account(code)

    def seed_default_chart(self) -> int:
        """Create every default chart entry that does not exist yet.

        Returns:
            Number of accounts created
        """
        created = 0
        with self.db.atomic():
            for code, name, account_class, category, subcategory, is_current in DEFAULT_CHART_OF_ACCOUNTS:
                if self.db.get_account(code) is not None:
                    continue
                self.db.create_account(
                    code=code,
                    name=name,
                    account_class=account_class,
                    category=category,
                    subcategory=subcategory,
                    **chart_entry_flags(account_class, is_current),
                )
                created += 1
        logger.info("Seeded %d default accounts", created)
        return created

    def validate_posting_map(self, posting_map: PostingMap, config: LedgerConfig) -> None:
        """Check that every account the posting engine can write to exists.

        Raises:
            ReferentialIntegrityError: If any mapped or counter account is missing
            ValidationError: If a mapped account has the wrong class
        """
        required = posting_map.required_accounts()
        required.add((config.receivable_account, AccountClass.ASSET))
        required.add((config.cash_account, AccountClass.ASSET))
        required.add((config.payable_account, AccountClass.LIABILITY))

        accounts = {account.code: account for account in self.db.list_accounts()}
        missing = {code for code, _ in required if code not in accounts}
        if missing:
            raise ReferentialIntegrityError(missing_accounts(list(missing), "posting"))

        mismatched = [
            f"{code} is {accounts[code].account_class.value}, expected {expected.value}"
            for code, expected in sorted(required)
            if accounts[code].account_class != expected
        ]
        if mismatched:
            raise ValidationError("Posting map targets accounts of the wrong class: " + "; ".join(mismatched))
