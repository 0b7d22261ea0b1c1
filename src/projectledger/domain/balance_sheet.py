"""Balance-sheet assembly.

Combines account balances, fixed-asset book values and project WIP into a
categorized balance sheet and checks that assets equal liabilities plus
equity (including the period's net income).
"""

import logging
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Optional, Union

from projectledger.config import LedgerConfig
from projectledger.database.base import Database
from projectledger.domain.balance import BalanceAggregator
from projectledger.domain.entities import (
    Account,
    AccountBalance,
    AccountClass,
    BalanceSheet,
    BalanceSheetSummary,
    ComparativeBalanceSheet,
    FixedAsset,
    GroupedBalances,
    ProjectWip,
)
from projectledger.domain.errors import ValidationError, invalid_report_date
from projectledger.domain.wip import WipService

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
HUNDRED = Decimal("100")
PERCENT_PLACES = Decimal("0.01")

DEFAULT_SUBCATEGORY = "General"
OTHER_CURRENT_ASSETS = "Other Current Assets"
OTHER_NON_CURRENT_ASSETS = "Other Non-Current Assets"
OTHER_CURRENT_LIABILITIES = "Other Current Liabilities"
OTHER_NON_CURRENT_LIABILITIES = "Other Non-Current Liabilities"
EQUITY_CATEGORY = "Equity"
ACCUMULATED_DEPRECIATION = "Accumulated Depreciation"

NEGATIVE_WIP_ACCOUNT = Account(
    code="WIP-NEG",
    name="Advance from Customers (Negative WIP)",
    account_class=AccountClass.LIABILITY,
    category="Current Liabilities",
    subcategory="Customer Advances",
    is_current_liability=True,
)

# Summary fields compared between two balance sheets
COMPARED_TOTALS = (
    "total_assets",
    "total_liabilities",
    "total_equity",
    "net_income",
    "total_equity_with_income",
)

SUMMARY_KEYS = {
    "total_assets": "totalAssets",
    "total_current_assets": "totalCurrentAssets",
    "total_non_current_assets": "totalNonCurrentAssets",
    "total_account_assets": "totalAccountAssets",
    "total_fixed_assets": "totalFixedAssets",
    "total_wip": "totalWIP",
    "total_contra_assets": "totalContraAssets",
    "total_negative_wip": "totalNegativeWIP",
    "total_current_liabilities": "totalCurrentLiabilities",
    "total_non_current_liabilities": "totalNonCurrentLiabilities",
    "total_liabilities": "totalLiabilities",
    "total_equity": "totalEquity",
    "total_revenue": "totalRevenue",
    "total_expense": "totalExpense",
    "net_income": "netIncome",
    "total_equity_with_income": "totalEquityWithIncome",
    "total_liabilities_and_equity": "totalLiabilitiesAndEquity",
    "difference": "difference",
    "is_balanced": "isBalanced",
}


def _add_line(groups: GroupedBalances, category: str, subcategory: str, line: AccountBalance) -> None:
    groups.setdefault(category, {}).setdefault(subcategory, []).append(line)


def _group_total(groups: GroupedBalances) -> Decimal:
    return sum(
        (line.balance for subgroups in groups.values() for lines in subgroups.values() for line in lines),
        ZERO,
    )


def percent_change(current: Decimal, previous: Decimal) -> Decimal:
    """Change from previous to current in percent; 0 when previous is zero."""
    if previous == 0:
        return ZERO
    return ((current - previous) / abs(previous) * HUNDRED).quantize(PERCENT_PLACES)


def parse_report_date(value: Union[str, date, None]) -> date:
    """Resolve an ISO report date; None means today.

    Raises:
        ValidationError: If the value cannot be parsed
    """
    if value is None:
        return date.today()
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(value.strip())
    except ValueError:
        raise ValidationError(invalid_report_date(value))


class BalanceSheetService:
    """Read-only service that assembles balance sheets."""

    def __init__(
        self,
        db: Database,
        config: Optional[LedgerConfig] = None,
        aggregator: Optional[BalanceAggregator] = None,
        wip_service: Optional[WipService] = None,
    ):
        """Initialize balance sheet service.

        Args:
            db: Database instance
            config: Reserved codes and tolerance (defaults to LedgerConfig())
            aggregator: Balance aggregator (built from db if omitted)
            wip_service: WIP engine (built from db if omitted)
        """
        self.db = db
        self.config = config or LedgerConfig()
        self.aggregator = aggregator or BalanceAggregator(db)
        self.wip_service = wip_service or WipService(db)

    def _is_excluded(self, account: Account) -> bool:
        """Accounts whose value comes from the fixed-asset register or WIP."""
        return account.account_class == AccountClass.FIXED_ASSET or self.config.is_reserved_asset_code(
            account.code
        )

    def assemble(self, as_of: date) -> BalanceSheet:
        """Assemble the balance sheet as of a date.

        Never raises on an unbalanced result; the summary's is_balanced flag
        reports it instead.
        """
        balances = self.aggregator.aggregate(as_of, exclude=self._is_excluded)

        current_assets: GroupedBalances = {}
        non_current_assets: GroupedBalances = {}
        contra_assets: GroupedBalances = {}
        current_liabilities: GroupedBalances = {}
        non_current_liabilities: GroupedBalances = {}
        equity: GroupedBalances = {}
        total_revenue = ZERO
        total_expense = ZERO

        for line in balances.values():
            account = line.account
            account_class = account.account_class

            if account_class == AccountClass.REVENUE:
                total_revenue += line.balance
                continue
            if account_class == AccountClass.EXPENSE:
                # Debits carry expense balances negative
                total_expense -= line.balance
                continue
            if line.balance == 0:
                continue

            subcategory = account.subcategory or DEFAULT_SUBCATEGORY
            if account_class == AccountClass.CONTRA_ASSET:
                _add_line(contra_assets, ACCUMULATED_DEPRECIATION, DEFAULT_SUBCATEGORY, line)
            elif account_class == AccountClass.ASSET:
                if account.is_current:
                    _add_line(current_assets, account.category or OTHER_CURRENT_ASSETS, subcategory, line)
                else:
                    _add_line(
                        non_current_assets, account.category or OTHER_NON_CURRENT_ASSETS, subcategory, line
                    )
            elif account_class == AccountClass.LIABILITY:
                if account.is_current:
                    _add_line(
                        current_liabilities, account.category or OTHER_CURRENT_LIABILITIES, subcategory, line
                    )
                else:
                    _add_line(
                        non_current_liabilities,
                        account.category or OTHER_NON_CURRENT_LIABILITIES,
                        subcategory,
                        line,
                    )
            elif account_class == AccountClass.EQUITY:
                _add_line(equity, account.category or EQUITY_CATEGORY, subcategory, line)

        fixed_assets = tuple(self.db.list_fixed_assets(as_of=as_of))
        total_fixed_assets = sum((asset.book_value for asset in fixed_assets), ZERO)

        wip = self.wip_service.valuate(as_of)
        if wip.total_negative_wip > 0:
            _add_line(
                current_liabilities,
                NEGATIVE_WIP_ACCOUNT.category,
                NEGATIVE_WIP_ACCOUNT.subcategory,
                AccountBalance(account=NEGATIVE_WIP_ACCOUNT, balance=wip.total_negative_wip),
            )

        current_account_assets = _group_total(current_assets)
        non_current_account_assets = _group_total(non_current_assets)
        total_contra_assets = _group_total(contra_assets)
        total_account_assets = current_account_assets + non_current_account_assets
        total_assets = total_account_assets + total_fixed_assets + wip.total_wip + total_contra_assets

        total_current_liabilities = _group_total(current_liabilities)
        total_non_current_liabilities = _group_total(non_current_liabilities)
        total_liabilities = total_current_liabilities + total_non_current_liabilities

        total_equity = _group_total(equity)
        net_income = total_revenue - total_expense
        total_equity_with_income = total_equity + net_income
        total_liabilities_and_equity = total_liabilities + total_equity_with_income
        difference = total_assets - total_liabilities_and_equity
        is_balanced = abs(difference) < self.config.balance_tolerance

        for line in contra_assets.get(ACCUMULATED_DEPRECIATION, {}).get(DEFAULT_SUBCATEGORY, []):
            _add_line(non_current_assets, ACCUMULATED_DEPRECIATION, DEFAULT_SUBCATEGORY, line)

        summary = BalanceSheetSummary(
            total_assets=total_assets,
            total_current_assets=current_account_assets + wip.total_wip,
            total_non_current_assets=non_current_account_assets + total_fixed_assets + total_contra_assets,
            total_account_assets=total_account_assets,
            total_fixed_assets=total_fixed_assets,
            total_wip=wip.total_wip,
            total_contra_assets=total_contra_assets,
            total_negative_wip=wip.total_negative_wip,
            total_current_liabilities=total_current_liabilities,
            total_non_current_liabilities=total_non_current_liabilities,
            total_liabilities=total_liabilities,
            total_equity=total_equity,
            total_revenue=total_revenue,
            total_expense=total_expense,
            net_income=net_income,
            total_equity_with_income=total_equity_with_income,
            total_liabilities_and_equity=total_liabilities_and_equity,
            difference=difference,
            is_balanced=is_balanced,
        )

        if not is_balanced:
            logger.warning(
                "Balance sheet as of %s is unbalanced by %s: account assets %s, fixed assets %s, "
                "WIP %s, contra assets %s, liabilities %s (negative WIP %s), equity %s, net income %s",
                as_of.isoformat(),
                difference,
                total_account_assets,
                total_fixed_assets,
                wip.total_wip,
                total_contra_assets,
                total_liabilities,
                wip.total_negative_wip,
                total_equity,
                net_income,
            )

        return BalanceSheet(
            as_of=as_of,
            current_assets=current_assets,
            non_current_assets=non_current_assets,
            fixed_assets=fixed_assets,
            wip_items=wip.asset_projects,
            current_liabilities=current_liabilities,
            non_current_liabilities=non_current_liabilities,
            equity=equity,
            summary=summary,
        )

    def comparative(self, current_date: date, previous_date: date) -> ComparativeBalanceSheet:
        """Assemble two balance sheets and the change in their headline totals."""
        current = self.assemble(current_date)
        previous = self.assemble(previous_date)

        changes = {}
        percent_changes = {}
        for field_name in COMPARED_TOTALS:
            current_value = getattr(current.summary, field_name)
            previous_value = getattr(previous.summary, field_name)
            changes[field_name] = current_value - previous_value
            percent_changes[field_name] = percent_change(current_value, previous_value)

        return ComparativeBalanceSheet(
            current=current,
            previous=previous,
            changes=changes,
            percent_changes=percent_changes,
        )

    def generate_balance_sheet(self, report_date: Union[str, date, None] = None) -> dict[str, Any]:
        """Balance sheet in the external payload shape.

        Raises:
            ValidationError: If report_date cannot be parsed
        """
        sheet = self.assemble(parse_report_date(report_date))
        return {"success": True, "data": balance_sheet_to_dict(sheet)}

    def generate_comparative_balance_sheet(
        self, current_date: Union[str, date], previous_date: Union[str, date]
    ) -> dict[str, Any]:
        """Comparative balance sheet in the external payload shape.

        Raises:
            ValidationError: If either date cannot be parsed
        """
        if current_date is None or previous_date is None:
            raise ValidationError("Both current and previous dates are required")
        comparison = self.comparative(parse_report_date(current_date), parse_report_date(previous_date))
        return {"success": True, "data": comparative_to_dict(comparison)}


def _lines_to_dict(groups: GroupedBalances) -> dict[str, dict[str, list[dict[str, Any]]]]:
    return {
        category: {
            subcategory: [
                {"code": line.code, "name": line.name, "balance": line.balance} for line in lines
            ]
            for subcategory, lines in subgroups.items()
        }
        for category, subgroups in groups.items()
    }


def _fixed_asset_to_dict(asset: FixedAsset) -> dict[str, Any]:
    return {
        "id": asset.id,
        "name": asset.name,
        "category": asset.category,
        "value": asset.value,
        "accumulatedDepreciation": asset.accumulated_depreciation,
        "bookValue": asset.book_value,
    }


def _wip_to_dict(item: ProjectWip) -> dict[str, Any]:
    return {
        "projectId": item.project_id,
        "projectCode": item.project_code,
        "name": item.name,
        "costs": item.costs,
        "billed": item.billed,
        "wip": item.wip,
    }


def summary_to_dict(summary: BalanceSheetSummary) -> dict[str, Any]:
    """Summary with its external camelCase keys."""
    return {key: getattr(summary, field_name) for field_name, key in SUMMARY_KEYS.items()}


def balance_sheet_to_dict(sheet: BalanceSheet) -> dict[str, Any]:
    """Convert a balance sheet to its external dict shape; amounts stay Decimal."""
    return {
        "date": sheet.as_of.isoformat(),
        "assets": {
            "current": _lines_to_dict(sheet.current_assets),
            "nonCurrent": _lines_to_dict(sheet.non_current_assets),
            "fixedAssets": [_fixed_asset_to_dict(asset) for asset in sheet.fixed_assets],
            "wip": [_wip_to_dict(item) for item in sheet.wip_items],
        },
        "liabilities": {
            "current": _lines_to_dict(sheet.current_liabilities),
            "nonCurrent": _lines_to_dict(sheet.non_current_liabilities),
        },
        "equity": _lines_to_dict(sheet.equity),
        "summary": summary_to_dict(sheet.summary),
    }


def comparative_to_dict(comparison: ComparativeBalanceSheet) -> dict[str, Any]:
    """Convert a comparative balance sheet to its external dict shape."""
    return {
        "current": balance_sheet_to_dict(comparison.current),
        "previous": balance_sheet_to_dict(comparison.previous),
        "changes": {SUMMARY_KEYS[name]: value for name, value in comparison.changes.items()},
        "percentChanges": {
            SUMMARY_KEYS[name]: value for name, value in comparison.percent_changes.items()
        },
    }
