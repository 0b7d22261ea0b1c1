"""Shared pytest fixtures for projectledger tests."""

import tempfile
import os
from datetime import date
from decimal import Decimal
import pytest
from click.testing import CliRunner

from projectledger.database.factories import create_sqlite_database
from projectledger.domain.account import AccountService
from projectledger.domain.balance import BalanceAggregator
from projectledger.domain.balance_sheet import BalanceSheetService
from projectledger.domain.entities import ProjectStatus, RevenueLine
from projectledger.domain.events import EventBus
from projectledger.domain.fixed_asset import FixedAssetService
from projectledger.domain.journal import JournalService
from projectledger.domain.project import ProjectService
from projectledger.domain.wip import WipService
from projectledger.logging_config import reset_logging


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    db = create_sqlite_database(database_path=db_path)
    # Store the path for CLI tests that need it
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture(autouse=True)
def _reset_logging():
    yield
    reset_logging()


@pytest.fixture
def account_service(temp_db):
    """Create an AccountService with a temporary database."""
    return AccountService(temp_db)


@pytest.fixture
def seeded_db(temp_db, account_service):
    """Temporary database with the default chart of accounts."""
    account_service.seed_default_chart()
    return temp_db


@pytest.fixture
def event_bus():
    return EventBus()


@pytest.fixture
def journal_service(seeded_db, event_bus):
    """Create a JournalService over a seeded database."""
    return JournalService(seeded_db, events=event_bus)


@pytest.fixture
def project_service(seeded_db, journal_service):
    """Create a ProjectService sharing the journal service."""
    return ProjectService(seeded_db, journal=journal_service)


@pytest.fixture
def aggregator(seeded_db):
    return BalanceAggregator(seeded_db)


@pytest.fixture
def wip_service(seeded_db):
    return WipService(seeded_db)


@pytest.fixture
def balance_sheet_service(seeded_db):
    return BalanceSheetService(seeded_db)


@pytest.fixture
def fixed_asset_service(seeded_db):
    return FixedAssetService(seeded_db)


@pytest.fixture
def sample_project(project_service):
    """An ongoing boring project started at the beginning of 2024."""
    project_id = project_service.create_project(
        project_code="PRJ-001",
        name="Soil Investigation Sudirman",
        total_value=Decimal("50000000"),
        start_date=date(2024, 1, 1),
        revenue_line=RevenueLine.BORING,
    )
    return project_service.get_project(project_id)


@pytest.fixture
def completed_project(project_service):
    """A completed sondir project; its costs and billings produce no WIP."""
    project_id = project_service.create_project(
        project_code="PRJ-900",
        name="Sondir Kemang",
        total_value=Decimal("20000000"),
        start_date=date(2024, 1, 1),
        revenue_line=RevenueLine.SONDIR,
        status=ProjectStatus.COMPLETED,
        end_date=date(2024, 6, 30),
    )
    return project_service.get_project(project_id)


@pytest.fixture
def cli_runner():
    """Create a Click CLI runner."""
    return CliRunner()
