"""Tests for balance-sheet assembly."""

import logging
from datetime import date, datetime
from decimal import Decimal

import pytest

from projectledger.config import LedgerConfig
from projectledger.database.factories import create_sqlite_database
from projectledger.domain.balance_sheet import (
    NEGATIVE_WIP_ACCOUNT,
    BalanceSheetService,
    parse_report_date,
    percent_change,
)
from projectledger.domain.entities import EntityKind, RevenueLine
from projectledger.domain.errors import ValidationError


def _codes(groups):
    return {
        category: {subcategory: [line.code for line in lines] for subcategory, lines in subgroups.items()}
        for category, subgroups in groups.items()
    }


def test_empty_ledger_is_balanced(balance_sheet_service):
    """Test a seeded but unused ledger reports all zeros."""
    sheet = balance_sheet_service.assemble(date(2024, 12, 31))

    assert sheet.current_assets == {}
    assert sheet.equity == {}
    assert sheet.summary.total_assets == Decimal("0")
    assert sheet.summary.difference == Decimal("0")
    assert sheet.summary.is_balanced is True


def test_capital_injection(seeded_db, balance_sheet_service):
    seeded_db.create_posting_pair(
        date(2024, 1, 2), "1101", "3101", Decimal("100000000"), "Capital #1: paid-in capital"
    )

    sheet = balance_sheet_service.assemble(date(2024, 1, 31))

    assert _codes(sheet.current_assets) == {"Cash & Bank": {"Cash": ["1101"]}}
    assert _codes(sheet.equity) == {"Equity": {"Share Capital": ["3101"]}}
    assert sheet.summary.total_assets == Decimal("100000000.00")
    assert sheet.summary.total_equity == Decimal("100000000.00")
    assert sheet.summary.is_balanced


def test_completed_project_reconciles(project_service, balance_sheet_service, completed_project):
    """Test accruals and payments on a completed project keep the sheet balanced."""
    cost_id = project_service.add_cost(
        completed_project.id, "labor", Decimal("6000000"), date(2024, 2, 1), status="unpaid"
    )
    billing_id = project_service.add_billing(
        completed_project.id, Decimal("20000000"), date(2024, 2, 15), status="unpaid"
    )
    project_service.change_status(EntityKind.COST, cost_id, "paid", payment_date=date(2024, 3, 1))
    project_service.change_status(
        EntityKind.BILLING, billing_id, "paid", payment_date=date(2024, 3, 10)
    )

    february = balance_sheet_service.assemble(date(2024, 2, 29)).summary
    assert february.total_assets == Decimal("20000000.00")
    assert february.total_liabilities == Decimal("6000000.00")
    assert february.total_revenue == Decimal("20000000.00")
    assert february.total_expense == Decimal("6000000.00")
    assert february.net_income == Decimal("14000000.00")
    assert february.is_balanced

    march = balance_sheet_service.assemble(date(2024, 3, 31))
    assert _codes(march.current_assets) == {"Cash & Bank": {"Cash": ["1101"]}}
    assert march.summary.total_assets == Decimal("14000000.00")
    assert march.summary.total_liabilities == Decimal("0")
    assert march.summary.total_equity_with_income == Decimal("14000000.00")
    assert march.summary.is_balanced


def test_reserved_accounts_come_from_register_and_wip(
    seeded_db, balance_sheet_service, fixed_asset_service
):
    """Test 15xx and 1301 balances are replaced by the fixed-asset register and WIP."""
    seeded_db.create_posting_pair(
        date(2024, 1, 2), "1101", "3101", Decimal("100000000"), "Capital #1: paid-in capital"
    )
    seeded_db.create_posting_pair(
        date(2024, 1, 3), "1501", "1101", Decimal("30000000"), "Asset #1: boring rig"
    )
    seeded_db.create_posting_pair(
        date(2024, 1, 4), "1301", "1101", Decimal("999"), "Manual #1: stray WIP entry"
    )
    fixed_asset_service.create_fixed_asset(
        "Boring Rig", date(2024, 1, 3), Decimal("30000000"), 8, category="Equipment"
    )

    sheet = balance_sheet_service.assemble(date(2024, 1, 31))

    listed = [
        line.code
        for subgroups in sheet.current_assets.values()
        for lines in subgroups.values()
        for line in lines
    ]
    assert "1501" not in listed
    assert "1301" not in listed
    assert [asset.name for asset in sheet.fixed_assets] == ["Boring Rig"]
    assert sheet.summary.total_fixed_assets == Decimal("30000000.00")
    assert sheet.summary.total_account_assets == Decimal("69999001.00")


def test_fixed_assets_acquired_later_are_left_out(balance_sheet_service, fixed_asset_service):
    fixed_asset_service.create_fixed_asset("Truck", date(2024, 6, 1), Decimal("500000000"), 8)

    sheet = balance_sheet_service.assemble(date(2024, 5, 31))

    assert sheet.fixed_assets == ()
    assert sheet.summary.total_fixed_assets == Decimal("0")


def test_wip_on_asset_side(project_service, balance_sheet_service, sample_project):
    project_service.add_cost(sample_project.id, "labor", Decimal("3000000"), date(2024, 1, 10))

    sheet = balance_sheet_service.assemble(date(2024, 1, 31))

    assert [item.project_code for item in sheet.wip_items] == ["PRJ-001"]
    assert sheet.summary.total_wip == Decimal("3000000.00")
    assert sheet.summary.total_current_assets == Decimal("3000000.00")


def test_negative_wip_becomes_customer_advance(
    project_service, balance_sheet_service, sample_project
):
    """Test an over-billed ongoing project shows as a current liability line."""
    project_service.add_cost(sample_project.id, "labor", Decimal("10000000"), date(2024, 1, 10))
    project_service.add_billing(sample_project.id, Decimal("15000000"), date(2024, 1, 15))

    sheet = balance_sheet_service.assemble(date(2024, 1, 31))

    advances = sheet.current_liabilities["Current Liabilities"]["Customer Advances"]
    assert [line.code for line in advances] == [NEGATIVE_WIP_ACCOUNT.code]
    assert advances[0].balance == Decimal("5000000.00")
    assert sheet.summary.total_negative_wip == Decimal("5000000.00")
    assert sheet.summary.total_wip == Decimal("0")
    assert sheet.wip_items == ()


def test_long_term_liabilities(seeded_db, balance_sheet_service):
    seeded_db.create_posting_pair(
        date(2024, 1, 5), "1102", "2201", Decimal("50000000"), "Loan #1: bank facility"
    )

    sheet = balance_sheet_service.assemble(date(2024, 1, 31))

    assert _codes(sheet.non_current_liabilities) == {"Long-term Liabilities": {"Bank Loan": ["2201"]}}
    assert sheet.current_liabilities == {}
    assert sheet.summary.total_non_current_liabilities == Decimal("50000000.00")
    assert sheet.summary.is_balanced


def test_contra_assets_reduce_non_current_assets(seeded_db, balance_sheet_service):
    seeded_db.create_posting_pair(
        date(2024, 6, 30), "6105", "1601", Decimal("1000000"), "Depreciation #1: June"
    )

    sheet = balance_sheet_service.assemble(date(2024, 6, 30))

    lines = sheet.non_current_assets["Accumulated Depreciation"]["General"]
    assert [(line.code, line.balance) for line in lines] == [("1601", Decimal("-1000000.00"))]
    assert sheet.summary.total_contra_assets == Decimal("-1000000.00")
    assert sheet.summary.total_non_current_assets == Decimal("-1000000.00")
    assert sheet.summary.is_balanced


def test_accounts_without_labels_use_default_groups(seeded_db, account_service, balance_sheet_service):
    """Test accounts missing category or subcategory fall into the fallback groups."""
    account_service.create_account(code="1901", name="Deposit", account_class="asset")
    account_service.create_account(
        code="2901", name="Shareholder Loan", account_class="liability", is_current_liability=False
    )
    seeded_db.create_posting_pair(date(2024, 1, 5), "1901", "2901", Decimal("700"), "Loan #2: deposit")

    sheet = balance_sheet_service.assemble(date(2024, 1, 31))

    assert _codes(sheet.current_assets) == {"Other Current Assets": {"General": ["1901"]}}
    assert _codes(sheet.non_current_liabilities) == {"Other Non-Current Liabilities": {"General": ["2901"]}}


def test_unbalanced_sheet_logs_warning(project_service, balance_sheet_service, sample_project, caplog):
    """Test an unbalanced result is reported through the flag and a warning, not an exception."""
    project_service.add_cost(sample_project.id, "labor", Decimal("1000"), date(2024, 1, 10))

    with caplog.at_level(logging.WARNING, logger="projectledger"):
        sheet = balance_sheet_service.assemble(date(2024, 1, 31))

    assert sheet.summary.is_balanced is False
    assert sheet.summary.difference == Decimal("1000.00")
    assert "unbalanced" in caplog.text


def test_unposted_wip_is_the_whole_difference(project_service, balance_sheet_service, sample_project):
    """Test ongoing WIP, which is never posted, accounts for the entire imbalance."""
    project_service.add_cost(
        sample_project.id, "labor", Decimal("4000000"), date(2024, 1, 10), status="unpaid"
    )
    project_service.add_billing(sample_project.id, Decimal("1000000"), date(2024, 1, 15), status="unpaid")

    summary = balance_sheet_service.assemble(date(2024, 1, 31)).summary

    assert summary.total_wip == Decimal("3000000.00")
    assert summary.difference == summary.total_wip


def test_difference_nets_both_wip_pools(project_service, balance_sheet_service, sample_project):
    over_billed_id = project_service.create_project(
        project_code="PRJ-002",
        name="Boring Cikarang",
        total_value=Decimal("30000000"),
        start_date=date(2024, 1, 1),
        revenue_line=RevenueLine.BORING,
    )
    project_service.add_cost(
        sample_project.id, "labor", Decimal("4000000"), date(2024, 1, 10), status="unpaid"
    )
    project_service.add_billing(sample_project.id, Decimal("1000000"), date(2024, 1, 15), status="unpaid")
    project_service.add_cost(over_billed_id, "labor", Decimal("10000000"), date(2024, 1, 10), status="unpaid")
    project_service.add_billing(over_billed_id, Decimal("15000000"), date(2024, 1, 15), status="unpaid")

    summary = balance_sheet_service.assemble(date(2024, 1, 31)).summary

    assert summary.total_wip == Decimal("3000000.00")
    assert summary.total_negative_wip == Decimal("5000000.00")
    assert summary.difference == summary.total_wip - summary.total_negative_wip
    assert summary.difference == Decimal("-2000000.00")


def test_custom_tolerance(seeded_db):
    service = BalanceSheetService(seeded_db, config=LedgerConfig(balance_tolerance=Decimal("5000")))
    project_id = seeded_db.create_project(
        "PRJ-T", "Tolerance", Decimal("1"), date(2024, 1, 1), revenue_line=RevenueLine.BORING
    )
    seeded_db.create_project_cost(project_id, "labor", Decimal("1000"), date(2024, 1, 10))

    assert service.assemble(date(2024, 1, 31)).summary.is_balanced is True


def test_comparative(seeded_db, balance_sheet_service):
    seeded_db.create_posting_pair(
        date(2024, 1, 2), "1101", "3101", Decimal("100000000"), "Capital #1: paid-in capital"
    )
    seeded_db.create_posting_pair(
        date(2024, 7, 2), "1101", "3101", Decimal("50000000"), "Capital #2: second call"
    )

    comparison = balance_sheet_service.comparative(date(2024, 12, 31), date(2024, 6, 30))

    assert comparison.changes["total_assets"] == Decimal("50000000.00")
    assert comparison.percent_changes["total_assets"] == Decimal("50.00")
    assert comparison.changes["total_liabilities"] == Decimal("0")
    assert comparison.percent_changes["total_liabilities"] == Decimal("0")


def test_percent_change():
    assert percent_change(Decimal("150"), Decimal("100")) == Decimal("50.00")
    assert percent_change(Decimal("50"), Decimal("-100")) == Decimal("150.00")
    assert percent_change(Decimal("10"), Decimal("0")) == Decimal("0")
    assert percent_change(Decimal("1"), Decimal("3")) == Decimal("-66.67")


def test_parse_report_date():
    assert parse_report_date("2024-06-30") == date(2024, 6, 30)
    assert parse_report_date(date(2024, 6, 30)) == date(2024, 6, 30)
    assert parse_report_date(datetime(2024, 6, 30, 17, 45)) == date(2024, 6, 30)
    assert parse_report_date(None) == date.today()
    with pytest.raises(ValidationError, match="Invalid report date '30/06/2024'"):
        parse_report_date("30/06/2024")


class TestPayload:
    """External dict shape of generated reports."""

    def test_generate_balance_sheet_shape(self, seeded_db, balance_sheet_service):
        seeded_db.create_posting_pair(
            date(2024, 1, 2), "1101", "3101", Decimal("1000"), "Capital #1: paid-in capital"
        )

        payload = balance_sheet_service.generate_balance_sheet("2024-01-31")

        assert payload["success"] is True
        data = payload["data"]
        assert data["date"] == "2024-01-31"
        assert set(data["assets"]) == {"current", "nonCurrent", "fixedAssets", "wip"}
        assert set(data["liabilities"]) == {"current", "nonCurrent"}
        assert data["assets"]["current"]["Cash & Bank"]["Cash"] == [
            {"code": "1101", "name": "Cash", "balance": Decimal("1000.00")}
        ]
        summary = data["summary"]
        assert summary["totalAssets"] == Decimal("1000.00")
        assert summary["isBalanced"] is True
        assert "totalWIP" in summary and "totalNegativeWIP" in summary

    def test_generate_accepts_datetime(self, project_service, balance_sheet_service, completed_project):
        project_service.add_cost(
            completed_project.id, "labor", Decimal("1000"), date(2024, 2, 1), status="unpaid"
        )

        payload = balance_sheet_service.generate_balance_sheet(datetime(2024, 2, 1, 12, 0))

        assert payload["data"]["date"] == "2024-02-01"
        assert payload["data"]["summary"]["isBalanced"] is True

    def test_generate_rejects_malformed_date(self, balance_sheet_service):
        with pytest.raises(ValidationError):
            balance_sheet_service.generate_balance_sheet("last tuesday")

    def test_comparative_payload(self, balance_sheet_service):
        payload = balance_sheet_service.generate_comparative_balance_sheet("2024-12-31", "2024-06-30")

        data = payload["data"]
        assert data["current"]["date"] == "2024-12-31"
        assert data["previous"]["date"] == "2024-06-30"
        assert set(data["changes"]) == {
            "totalAssets",
            "totalLiabilities",
            "totalEquity",
            "netIncome",
            "totalEquityWithIncome",
        }
        assert set(data["percentChanges"]) == set(data["changes"])

    def test_comparative_requires_both_dates(self, balance_sheet_service):
        with pytest.raises(ValidationError, match="Both"):
            balance_sheet_service.generate_comparative_balance_sheet("2024-12-31", None)


def test_report_is_read_only(seeded_db, balance_sheet_service):
    """Test assembling a report leaves the postings untouched."""
    seeded_db.create_posting_pair(
        date(2024, 1, 2), "1101", "3101", Decimal("1000"), "Capital #1: paid-in capital"
    )
    before = seeded_db.list_postings()

    balance_sheet_service.assemble(date(2024, 1, 31))
    balance_sheet_service.comparative(date(2024, 1, 31), date(2023, 12, 31))

    assert seeded_db.list_postings() == before


def test_second_connection_sees_same_report(seeded_db, balance_sheet_service):
    seeded_db.create_posting_pair(
        date(2024, 1, 2), "1101", "3101", Decimal("1000"), "Capital #1: paid-in capital"
    )
    other_db = create_sqlite_database(seeded_db.database_path)
    try:
        other = BalanceSheetService(other_db).assemble(date(2024, 1, 31))
    finally:
        other_db.disconnect()

    assert other.summary == balance_sheet_service.assemble(date(2024, 1, 31)).summary
