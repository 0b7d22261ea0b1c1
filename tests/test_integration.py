"""Integration tests for end-to-end workflows."""

import json

from projectledger.cli.main import cli


def test_full_workflow(cli_runner, temp_db):
    """Test complete workflow: chart → project → cost/billing → status → reports."""
    db_args = ["--db-path", temp_db.database_path]

    # Step 1: Seed the chart of accounts
    result = cli_runner.invoke(cli, db_args + ["init-accounts"])
    assert result.exit_code == 0
    assert "default accounts" in result.output

    # Step 2: Create a project that is already completed, so no unposted WIP exists
    result = cli_runner.invoke(
        cli,
        db_args
        + [
            "project", "create", "PRJ-100", "Sondir Kemang",
            "--value", "Rp 20,000,000", "--revenue-line", "sondir",
            "--start", "2024-01-01", "--end", "2024-03-31", "--status", "completed",
        ],
    )
    assert result.exit_code == 0
    assert "Created project PRJ-100" in result.output

    # Step 3: Record a cost and a billing, both accrued immediately
    result = cli_runner.invoke(
        cli,
        db_args
        + [
            "cost", "add", "--project", "PRJ-100", "--category", "labor",
            "--amount", "6,000,000", "--date", "2024-02-01", "--status", "unpaid",
        ],
    )
    assert result.exit_code == 0
    assert "Created cost #1 (unpaid)" in result.output

    result = cli_runner.invoke(
        cli,
        db_args
        + [
            "billing", "add", "--project", "PRJ-100", "--amount", "20000000",
            "--date", "2024-02-15", "--status", "unpaid",
        ],
    )
    assert result.exit_code == 0
    assert "Created billing #1 (unpaid)" in result.output

    # Step 4: Pay both
    result = cli_runner.invoke(
        cli, db_args + ["cost", "status", "1", "paid", "--payment-date", "2024-03-01", "--note", "BCA"]
    )
    assert result.exit_code == 0
    assert "Cost #1 is now paid" in result.output
    assert "Posted DR 2102 / CR 1101 6,000,000.00 on 2024-03-01" in result.output

    result = cli_runner.invoke(
        cli, db_args + ["billing", "status", "1", "paid", "--payment-date", "2024-03-10"]
    )
    assert result.exit_code == 0
    assert "Posted DR 1101 / CR 1201 20,000,000.00 on 2024-03-10" in result.output

    # Step 5: Postings are balanced
    result = cli_runner.invoke(cli, db_args + ["journal", "verify", "cost", "1"])
    assert result.exit_code == 0
    assert "4 postings balanced" in result.output

    # Step 6: History shows both transitions, newest first
    result = cli_runner.invoke(cli, db_args + ["cost", "history", "1"])
    assert result.exit_code == 0
    lines = [line for line in result.output.splitlines() if "->" in line]
    assert "unpaid -> paid" in lines[0]
    assert "BCA" in lines[0]
    assert "pending -> unpaid" in lines[1]

    # Step 7: Balance sheet reconciles
    result = cli_runner.invoke(cli, db_args + ["balance-sheet", "--date", "2024-03-31"])
    assert result.exit_code == 0
    assert "Balanced." in result.output
    assert "14,000,000.00" in result.output

    # Step 8: JSON comparative report
    result = cli_runner.invoke(
        cli, db_args + ["balance-sheet", "--date", "2024-03-31", "--compare", "2024-02-29", "--json"]
    )
    assert result.exit_code == 0
    payload = json.loads(result.output)
    assert payload["success"] is True
    assert payload["data"]["current"]["summary"]["isBalanced"] is True
    assert payload["data"]["previous"]["summary"]["totalAssets"] == "20000000.00"
    assert payload["data"]["changes"]["totalAssets"] == "-6000000.00"


def test_wip_workflow(cli_runner, temp_db):
    """Test WIP reporting for an ongoing project, positive and then negative."""
    db_args = ["--db-path", temp_db.database_path]
    cli_runner.invoke(cli, db_args + ["init-accounts"])
    cli_runner.invoke(
        cli,
        db_args
        + [
            "project", "create", "PRJ-200", "Boring Cikarang",
            "--value", "50000000", "--revenue-line", "boring", "--start", "2024-01-01",
        ],
    )
    cli_runner.invoke(
        cli,
        db_args
        + [
            "cost", "add", "--project", "PRJ-200", "--category", "material",
            "--amount", "10000000", "--date", "2024-01-10",
        ],
    )

    result = cli_runner.invoke(cli, db_args + ["wip", "--date", "2024-01-31"])
    assert result.exit_code == 0
    assert "PRJ-200" in result.output
    assert "10,000,000.00" in result.output

    cli_runner.invoke(
        cli,
        db_args + ["billing", "add", "--project", "PRJ-200", "--amount", "15000000", "--date", "2024-01-20"],
    )

    result = cli_runner.invoke(cli, db_args + ["wip", "--date", "2024-01-31"])
    assert "-5,000,000.00" in result.output

    result = cli_runner.invoke(cli, db_args + ["balance-sheet", "--date", "2024-01-31"])
    assert result.exit_code == 0
    assert "WIP-NEG Advance from Customers (Negative WIP)" in result.output
