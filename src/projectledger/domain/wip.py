"""Work-in-progress valuation per ongoing project."""

import logging
from datetime import date
from decimal import Decimal

from projectledger.database.base import Database
from projectledger.domain.entities import (
    Project,
    ProjectStatus,
    ProjectWip,
    WipSnapshot,
    WipValuation,
)
from projectledger.domain.errors import NotFoundError, project_not_found
from projectledger.domain.events import PostingsChanged

logger = logging.getLogger(__name__)

# Total cost is estimated at 70% of contract value when measuring progress.
ESTIMATED_COST_RATIO = Decimal("0.70")
HUNDRED = Decimal("100")
PERCENT_PLACES = Decimal("0.01")


def cost_progress(costs: Decimal, total_value: Decimal) -> Decimal:
    """Percent complete by cost incurred against estimated total cost, capped at 100."""
    estimated_cost = total_value * ESTIMATED_COST_RATIO
    if estimated_cost <= 0:
        return Decimal("0")
    return min(costs / estimated_cost * HUNDRED, HUNDRED).quantize(PERCENT_PLACES)


class WipService:
    """Nets cumulative costs against cumulative billings for each project."""

    def __init__(self, db: Database):
        """Initialize WIP service.

        Args:
            db: Database instance
        """
        self.db = db

    def _project_wip(self, project: Project, as_of: date) -> ProjectWip:
        costs = sum(
            (cost.amount for cost in self.db.list_project_costs(project_id=project.id, as_of=as_of)),
            Decimal("0"),
        )
        billed = sum(
            (billing.amount for billing in self.db.list_billings(project_id=project.id, as_of=as_of)),
            Decimal("0"),
        )
        return ProjectWip(
            project_id=project.id,
            project_code=project.project_code,
            name=project.name,
            costs=costs,
            billed=billed,
        )

    def project_wip(self, project_id: int, as_of: date) -> ProjectWip:
        """WIP of one project as of a date, regardless of its status.

        Raises:
            NotFoundError: If the project does not exist
        """
        project = self.db.get_project(project_id)
        if project is None:
            raise NotFoundError(project_not_found(project_id))
        return self._project_wip(project, as_of)

    def valuate(self, as_of: date) -> WipValuation:
        """Value WIP over ongoing projects started on or before as_of.

        Positive WIP adds to total_wip and negative WIP adds its absolute value
        to total_negative_wip. The two pools are never netted.
        """
        projects = [
            project
            for project in self.db.list_projects(status=ProjectStatus.ONGOING)
            if project.start_date <= as_of
        ]
        items = tuple(self._project_wip(project, as_of) for project in projects)

        total_wip = sum((item.wip for item in items if item.wip > 0), Decimal("0"))
        total_negative_wip = sum((-item.wip for item in items if item.wip < 0), Decimal("0"))
        return WipValuation(
            as_of=as_of,
            projects=items,
            total_wip=total_wip,
            total_negative_wip=total_negative_wip,
        )

    def record_snapshot(self, project_id: int, as_of: date) -> WipSnapshot:
        """Store the project's current WIP and progress in its WIP history.

        Raises:
            NotFoundError: If the project does not exist
        """
        project = self.db.get_project(project_id)
        if project is None:
            raise NotFoundError(project_not_found(project_id))
        item = self._project_wip(project, as_of)
        progress = cost_progress(item.costs, project.total_value)

        self.db.add_wip_snapshot(
            project_id=project.id,
            as_of=as_of,
            costs=item.costs,
            billed=item.billed,
            wip=item.wip,
            progress=progress,
        )
        return self.db.list_wip_history(project.id)[0]

    def wip_history(self, project_id: int) -> list[WipSnapshot]:
        """A project's WIP snapshots, newest first.

        Raises:
            NotFoundError: If the project does not exist
        """
        if self.db.get_project(project_id) is None:
            raise NotFoundError(project_not_found(project_id))
        return self.db.list_wip_history(project_id)

    def handle_postings_changed(self, event: PostingsChanged) -> WipSnapshot:
        """Record a WIP snapshot for the project whose postings changed."""
        snapshot = self.record_snapshot(event.project_id, date.today())
        logger.info(
            "Project %d WIP after %s #%d %s: %s (%s%% complete)",
            event.project_id,
            event.entity_kind.value,
            event.entity_id,
            event.status.value,
            snapshot.wip,
            snapshot.progress,
        )
        return snapshot
