"""Default chart of accounts and the business-category posting map."""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Optional

from projectledger.domain.entities import AccountClass, RevenueLine
from projectledger.domain.errors import ValidationError


# (code, name, class, category, subcategory, is_current)
DEFAULT_CHART_OF_ACCOUNTS = [
    # Current assets
    ("1101", "Cash", AccountClass.ASSET, "Cash & Bank", "Cash", True),
    ("1102", "Bank BCA", AccountClass.ASSET, "Cash & Bank", "Bank", True),
    ("1103", "Bank Mandiri", AccountClass.ASSET, "Cash & Bank", "Bank", True),
    ("1104", "Bank BNI", AccountClass.ASSET, "Cash & Bank", "Bank", True),
    ("1105", "Bank BRI", AccountClass.ASSET, "Cash & Bank", "Bank", True),
    ("1201", "Accounts Receivable", AccountClass.ASSET, "Receivables", "Trade Receivable", True),
    ("1301", "Work In Progress", AccountClass.ASSET, "Inventory", "Work In Progress", True),
    # Fixed assets
    ("1501", "Boring Machines", AccountClass.FIXED_ASSET, "Fixed Assets", "Equipment", False),
    ("1502", "Sondir Machines", AccountClass.FIXED_ASSET, "Fixed Assets", "Equipment", False),
    ("1503", "Operational Vehicles", AccountClass.FIXED_ASSET, "Fixed Assets", "Vehicle", False),
    ("1504", "Office Equipment", AccountClass.FIXED_ASSET, "Fixed Assets", "Office Equipment", False),
    ("1505", "Office Building", AccountClass.FIXED_ASSET, "Fixed Assets", "Building", False),
    # Contra assets
    ("1601", "Accumulated Depreciation - Boring Machines", AccountClass.CONTRA_ASSET,
     "Accumulated Depreciation", "Equipment", False),
    ("1602", "Accumulated Depreciation - Sondir Machines", AccountClass.CONTRA_ASSET,
     "Accumulated Depreciation", "Equipment", False),
    ("1603", "Accumulated Depreciation - Vehicles", AccountClass.CONTRA_ASSET,
     "Accumulated Depreciation", "Vehicle", False),
    ("1604", "Accumulated Depreciation - Office Equipment", AccountClass.CONTRA_ASSET,
     "Accumulated Depreciation", "Office Equipment", False),
    ("1605", "Accumulated Depreciation - Building", AccountClass.CONTRA_ASSET,
     "Accumulated Depreciation", "Building", False),
    # Liabilities
    ("2101", "Short-term Bank Loan", AccountClass.LIABILITY, "Current Liabilities", "Bank Loan", True),
    ("2102", "Accounts Payable", AccountClass.LIABILITY, "Current Liabilities", "Trade Payable", True),
    ("2103", "Taxes Payable", AccountClass.LIABILITY, "Current Liabilities", "Tax Payable", True),
    ("2104", "Accrued Expenses", AccountClass.LIABILITY, "Current Liabilities", "Accrued Expense", True),
    ("2201", "Long-term Bank Loan", AccountClass.LIABILITY, "Long-term Liabilities", "Bank Loan", False),
    ("2202", "Lease Payable", AccountClass.LIABILITY, "Long-term Liabilities", "Leasing", False),
    # Equity
    ("3101", "Share Capital", AccountClass.EQUITY, "Equity", "Share Capital", None),
    ("3102", "Retained Earnings", AccountClass.EQUITY, "Equity", "Retained Earnings", None),
    # Revenue
    ("4001", "Boring Service Revenue", AccountClass.REVENUE, "Revenue", "Boring Service", None),
    ("4002", "Sondir Service Revenue", AccountClass.REVENUE, "Revenue", "Sondir Service", None),
    ("4003", "Consultation Service Revenue", AccountClass.REVENUE, "Revenue", "Consultation Service", None),
    # Project expenses
    ("5101", "Project Expense - Material", AccountClass.EXPENSE, "Project Expense", "Material", None),
    ("5102", "Project Expense - Labor", AccountClass.EXPENSE, "Project Expense", "Labor", None),
    ("5103", "Project Expense - Equipment Rental", AccountClass.EXPENSE, "Project Expense", "Equipment Rental", None),
    ("5104", "Project Expense - Transportation", AccountClass.EXPENSE, "Project Expense", "Transportation", None),
    ("5105", "Project Expense - Other", AccountClass.EXPENSE, "Project Expense", "Other", None),
    # Operating expenses
    ("6101", "Office Operating Expense", AccountClass.EXPENSE, "Operating Expense", "Office", None),
    ("6102", "Salaries & Benefits", AccountClass.EXPENSE, "Operating Expense", "Salary & Benefit", None),
    ("6103", "Electricity & Water", AccountClass.EXPENSE, "Operating Expense", "Utility", None),
    ("6104", "Internet & Telecommunication", AccountClass.EXPENSE, "Operating Expense", "Communication", None),
    ("6105", "Depreciation Expense", AccountClass.EXPENSE, "Operating Expense", "Depreciation", None),
]


DEFAULT_COST_CATEGORY_ACCOUNTS = {
    "material": "5101",
    "labor": "5102",
    "tenaga kerja": "5102",
    "equipment": "5103",
    "equipment rental": "5103",
    "sewa peralatan": "5103",
    "transportation": "5104",
    "transportasi": "5104",
    "other": "5105",
}

DEFAULT_REVENUE_LINE_ACCOUNTS = {
    RevenueLine.BORING: "4001",
    RevenueLine.SONDIR: "4002",
    RevenueLine.CONSULTATION: "4003",
}


def _frozen(mapping: Mapping) -> Mapping:
    return MappingProxyType(dict(mapping))


@dataclass(frozen=True)
class PostingMap:
    """Explicit lookup from business categories to account codes.

    Unmapped categories are rejected rather than routed to a default account.
    """

    cost_category_accounts: Mapping[str, str] = field(
        default_factory=lambda: _frozen(DEFAULT_COST_CATEGORY_ACCOUNTS)
    )
    revenue_line_accounts: Mapping[RevenueLine, str] = field(
        default_factory=lambda: _frozen(DEFAULT_REVENUE_LINE_ACCOUNTS)
    )

    def expense_account_for(self, category: str) -> str:
        """Return the expense account for a cost category.

        Raises:
            ValidationError: If the category has no mapping
        """
        code = self.cost_category_accounts.get(category.strip().lower())
        if code is None:
            known = ", ".join(sorted(self.cost_category_accounts))
            raise ValidationError(f"Unmapped cost category '{category}'. Known categories: {known}")
        return code

    def revenue_account_for(self, revenue_line: RevenueLine) -> str:
        """Return the revenue account for a project's service line.

        Raises:
            ValidationError: If the revenue line has no mapping
        """
        code = self.revenue_line_accounts.get(revenue_line)
        if code is None:
            raise ValidationError(f"Unmapped revenue line '{revenue_line.value}'")
        return code

    def required_accounts(self) -> set[tuple[str, AccountClass]]:
        """Every code the map posts to, paired with the class it must have."""
        required = {(code, AccountClass.EXPENSE) for code in self.cost_category_accounts.values()}
        required.update((code, AccountClass.REVENUE) for code in self.revenue_line_accounts.values())
        return required


def chart_entry_flags(account_class: AccountClass, is_current: Optional[bool]) -> dict[str, Optional[bool]]:
    """Translate a chart row's single current flag to the account's two flags."""
    if account_class == AccountClass.LIABILITY:
        return {"is_current_asset": None, "is_current_liability": is_current}
    return {"is_current_asset": is_current, "is_current_liability": None}
