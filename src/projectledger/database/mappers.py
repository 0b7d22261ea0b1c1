"""Mapper functions to convert SQLAlchemy models to domain entities.

Enum-valued columns are stored as their string values and converted back here,
so the rest of the package only ever sees the domain enums.
"""

from decimal import Decimal

from projectledger.domain import entities as domain
from projectledger.database.models import (
    Account as ORMAccount,
    Posting as ORMPosting,
    Project as ORMProject,
    ProjectCost as ORMProjectCost,
    Billing as ORMBilling,
    StatusHistory as ORMStatusHistory,
    FixedAsset as ORMFixedAsset,
    WipHistory as ORMWipHistory,
)


def _money(value) -> Decimal:
    return Decimal(str(value)).quantize(Decimal("0.01"))


def account_to_domain(orm_account: ORMAccount) -> domain.Account:
    """Convert SQLAlchemy Account model to domain Account entity."""
    return domain.Account(
        code=orm_account.code,
        name=orm_account.name,
        account_class=domain.AccountClass(orm_account.account_class),
        category=orm_account.category,
        subcategory=orm_account.subcategory,
        is_current_asset=orm_account.is_current_asset,
        is_current_liability=orm_account.is_current_liability,
        created_at=orm_account.created_at,
    )


def posting_to_domain(orm_posting: ORMPosting) -> domain.Posting:
    """Convert SQLAlchemy Posting model to domain Posting entity."""
    return domain.Posting(
        id=orm_posting.id,
        date=orm_posting.date,
        direction=domain.Direction(orm_posting.direction),
        account_code=orm_posting.account_code,
        description=orm_posting.description,
        amount=_money(orm_posting.amount),
        project_id=orm_posting.project_id,
        created_at=orm_posting.created_at,
    )


def project_to_domain(orm_project: ORMProject) -> domain.Project:
    """Convert SQLAlchemy Project model to domain Project entity."""
    return domain.Project(
        id=orm_project.id,
        project_code=orm_project.project_code,
        name=orm_project.name,
        total_value=_money(orm_project.total_value),
        status=domain.ProjectStatus(orm_project.status),
        start_date=orm_project.start_date,
        end_date=orm_project.end_date,
        revenue_line=domain.RevenueLine(orm_project.revenue_line),
        created_at=orm_project.created_at,
    )


def project_cost_to_domain(orm_cost: ORMProjectCost) -> domain.ProjectCost:
    """Convert SQLAlchemy ProjectCost model to domain ProjectCost entity."""
    return domain.ProjectCost(
        id=orm_cost.id,
        project_id=orm_cost.project_id,
        category=orm_cost.category,
        description=orm_cost.description,
        amount=_money(orm_cost.amount),
        date=orm_cost.date,
        status=domain.EntryStatus(orm_cost.status),
        create_journal_entry=orm_cost.create_journal_entry,
        version=orm_cost.version,
        created_at=orm_cost.created_at,
    )


def billing_to_domain(orm_billing: ORMBilling) -> domain.Billing:
    """Convert SQLAlchemy Billing model to domain Billing entity."""
    return domain.Billing(
        id=orm_billing.id,
        project_id=orm_billing.project_id,
        description=orm_billing.description,
        amount=_money(orm_billing.amount),
        billing_date=orm_billing.billing_date,
        status=domain.EntryStatus(orm_billing.status),
        create_journal_entry=orm_billing.create_journal_entry,
        version=orm_billing.version,
        created_at=orm_billing.created_at,
    )


def status_history_to_domain(orm_history: ORMStatusHistory) -> domain.StatusHistory:
    """Convert SQLAlchemy StatusHistory model to domain StatusHistory entity."""
    return domain.StatusHistory(
        id=orm_history.id,
        entity_kind=domain.EntityKind(orm_history.entity_kind),
        entity_id=orm_history.entity_id,
        old_status=domain.EntryStatus(orm_history.old_status),
        new_status=domain.EntryStatus(orm_history.new_status),
        changed_by=orm_history.changed_by,
        notes=orm_history.notes,
        changed_at=orm_history.changed_at,
    )


def fixed_asset_to_domain(orm_asset: ORMFixedAsset) -> domain.FixedAsset:
    """Convert SQLAlchemy FixedAsset model to domain FixedAsset entity."""
    return domain.FixedAsset(
        id=orm_asset.id,
        name=orm_asset.name,
        category=orm_asset.category,
        acquisition_date=orm_asset.acquisition_date,
        value=_money(orm_asset.value),
        accumulated_depreciation=_money(orm_asset.accumulated_depreciation or 0),
        useful_life_years=orm_asset.useful_life_years,
        created_at=orm_asset.created_at,
    )


def wip_snapshot_to_domain(orm_history: ORMWipHistory) -> domain.WipSnapshot:
    """Convert SQLAlchemy WipHistory model to domain WipSnapshot entity."""
    return domain.WipSnapshot(
        id=orm_history.id,
        project_id=orm_history.project_id,
        as_of=orm_history.as_of,
        costs=_money(orm_history.costs),
        billed=_money(orm_history.billed),
        wip=_money(orm_history.wip),
        progress=_money(orm_history.progress),
        recorded_at=orm_history.recorded_at,
    )
