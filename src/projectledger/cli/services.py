"""Build services from the objects the CLI group stores on the context."""

import click

from projectledger.domain.account import AccountService
from projectledger.domain.balance_sheet import BalanceSheetService
from projectledger.domain.chart import PostingMap
from projectledger.domain.journal import JournalService
from projectledger.domain.project import ProjectService


def journal_service(ctx: click.Context) -> JournalService:
    return JournalService(
        ctx.obj["db"],
        posting_map=ctx.obj["posting_map"],
        config=ctx.obj["config"],
        events=ctx.obj["events"],
    )


def project_service(ctx: click.Context) -> ProjectService:
    return ProjectService(ctx.obj["db"], journal=journal_service(ctx))


def balance_sheet_service(ctx: click.Context) -> BalanceSheetService:
    return BalanceSheetService(ctx.obj["db"], config=ctx.obj["config"])


def check_posting_accounts(ctx: click.Context) -> None:
    """Fail fast when the chart lacks an account the posting engine writes to.

    Raises:
        ReferentialIntegrityError: If a mapped account is missing
        ValidationError: If a mapped account has the wrong class
    """
    posting_map: PostingMap = ctx.obj["posting_map"]
    AccountService(ctx.obj["db"]).validate_posting_map(posting_map, ctx.obj["config"])
