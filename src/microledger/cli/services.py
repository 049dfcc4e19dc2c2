"""Build domain services from the CLI context."""

import click

from microledger.domain.account import AccountService
from microledger.domain.journal import JournalService
from microledger.domain.period import PeriodService
from microledger.domain.reporting import ReportingService
from microledger.domain.templates import TemplateService


def account_service(ctx: click.Context) -> AccountService:
    return AccountService(ctx.obj["db"])


def period_service(ctx: click.Context) -> PeriodService:
    return PeriodService(ctx.obj["db"])


def journal_service(ctx: click.Context) -> JournalService:
    """Journal engine guarded by the stored accounting period."""
    return JournalService(ctx.obj["db"], period_service(ctx).guard())


def reporting_service(ctx: click.Context) -> ReportingService:
    return ReportingService(ctx.obj["db"])


def template_service(ctx: click.Context) -> TemplateService:
    """Canned postings using the process-wide default tax rate."""
    db = ctx.obj["db"]
    return TemplateService(
        db,
        journal_service(ctx),
        ReportingService(db),
        default_tax_rate=ctx.obj.get("tax_rate") or 0,
    )
