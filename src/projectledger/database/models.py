"""SQLAlchemy models for the projectledger database."""

from datetime import datetime, UTC
from sqlalchemy import (
    Column,
    Integer,
    String,
    ForeignKey,
    DateTime,
    Date,
    Numeric,
    Boolean,
    Index,
    create_engine,
    event,
)
from sqlalchemy.orm import declarative_base, relationship, sessionmaker, Session

from projectledger.domain.errors import ImmutableRecordError

Base = declarative_base()

MONEY = Numeric(18, 2)


class Account(Base):
    """Chart-of-accounts entry, keyed by its code."""

    __tablename__ = "accounts"

    code = Column(String(4), primary_key=True)
    name = Column(String, nullable=False)
    account_class = Column(String, nullable=False)
    category = Column(String, nullable=True)
    subcategory = Column(String, nullable=True)
    is_current_asset = Column(Boolean, nullable=True)
    is_current_liability = Column(Boolean, nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    # Relationships
    postings = relationship("Posting", back_populates="account")


class Posting(Base):
    """One leg of a journal entry. Rows are inserted and deleted, never updated."""

    __tablename__ = "postings"

    id = Column(Integer, primary_key=True)
    date = Column(Date, nullable=False)
    direction = Column(String, nullable=False)
    account_code = Column(String(4), ForeignKey("accounts.code"), nullable=False)
    description = Column(String, nullable=False)
    amount = Column(MONEY, nullable=False)
    project_id = Column(Integer, ForeignKey("projects.id"), nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    __table_args__ = (
        Index("ix_postings_description", "description"),
        Index("ix_postings_date", "date"),
    )

    # Relationships
    account = relationship("Account", back_populates="postings")


class Project(Base):
    """Construction project."""

    __tablename__ = "projects"

    id = Column(Integer, primary_key=True)
    project_code = Column(String, unique=True, nullable=False)
    name = Column(String, nullable=False)
    total_value = Column(MONEY, nullable=False)
    status = Column(String, nullable=False)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=True)
    revenue_line = Column(String, nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    # Relationships
    costs = relationship("ProjectCost", back_populates="project")
    billings = relationship("Billing", back_populates="project")


class ProjectCost(Base):
    """Cost incurred on a project; version guards concurrent status changes."""

    __tablename__ = "project_costs"

    id = Column(Integer, primary_key=True)
    project_id = Column(Integer, ForeignKey("projects.id"), nullable=False)
    category = Column(String, nullable=False)
    description = Column(String, nullable=True)
    amount = Column(MONEY, nullable=False)
    date = Column(Date, nullable=False)
    status = Column(String, nullable=False)
    create_journal_entry = Column(Boolean, default=True, nullable=False)
    version = Column(Integer, nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    __mapper_args__ = {"version_id_col": version}

    # Relationships
    project = relationship("Project", back_populates="costs")


class Billing(Base):
    """Client billing on a project; version guards concurrent status changes."""

    __tablename__ = "billings"

    id = Column(Integer, primary_key=True)
    project_id = Column(Integer, ForeignKey("projects.id"), nullable=False)
    description = Column(String, nullable=True)
    amount = Column(MONEY, nullable=False)
    billing_date = Column(Date, nullable=False)
    status = Column(String, nullable=False)
    create_journal_entry = Column(Boolean, default=True, nullable=False)
    version = Column(Integer, nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    __mapper_args__ = {"version_id_col": version}

    # Relationships
    project = relationship("Project", back_populates="billings")


class StatusHistory(Base):
    """Append-only log of cost and billing status changes."""

    __tablename__ = "status_history"

    id = Column(Integer, primary_key=True)
    entity_kind = Column(String, nullable=False)
    entity_id = Column(Integer, nullable=False)
    old_status = Column(String, nullable=False)
    new_status = Column(String, nullable=False)
    changed_by = Column(Integer, nullable=True)
    notes = Column(String, nullable=True)
    changed_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    __table_args__ = (Index("ix_status_history_entity", "entity_kind", "entity_id"),)


class FixedAsset(Base):
    """Fixed asset register entry."""

    __tablename__ = "fixed_assets"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    category = Column(String, nullable=True)
    acquisition_date = Column(Date, nullable=False)
    value = Column(MONEY, nullable=False)
    accumulated_depreciation = Column(MONEY, default=0, nullable=False)
    useful_life_years = Column(Integer, nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)


class WipHistory(Base):
    """WIP snapshot of a project, appended each time its postings change."""

    __tablename__ = "wip_history"

    id = Column(Integer, primary_key=True)
    project_id = Column(Integer, ForeignKey("projects.id"), nullable=False)
    as_of = Column(Date, nullable=False)
    costs = Column(MONEY, nullable=False)
    billed = Column(MONEY, nullable=False)
    wip = Column(MONEY, nullable=False)
    progress = Column(Numeric(5, 2), nullable=False)
    recorded_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    __table_args__ = (Index("ix_wip_history_project", "project_id"),)


def _reject_update(mapper, connection, target) -> None:
    raise ImmutableRecordError(
        f"{type(target).__name__} {target.id} is append-only and cannot be modified"
    )


def _reject_delete(mapper, connection, target) -> None:
    raise ImmutableRecordError(
        f"{type(target).__name__} {target.id} is append-only and cannot be deleted"
    )


def register_immutability_listeners() -> None:
    """Install ORM hooks that reject updates to postings, status and WIP history."""
    hooks = (
        (Posting, "before_update", _reject_update),
        (StatusHistory, "before_update", _reject_update),
        (StatusHistory, "before_delete", _reject_delete),
        (WipHistory, "before_update", _reject_update),
    )
    for model, identifier, hook in hooks:
        if not event.contains(model, identifier, hook):
            event.listen(model, identifier, hook)


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    engine = create_engine(database_url, echo=False)
    Base.metadata.create_all(engine)
    register_immutability_listeners()
    return sessionmaker(bind=engine)
