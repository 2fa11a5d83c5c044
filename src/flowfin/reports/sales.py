"""Sales dashboard aggregations over the lead pipeline.

Lead values are often typed by hand ("$12,500", "12500.00"), so they are
parsed leniently: anything but digits, the decimal point and the minus sign
is stripped before conversion.
"""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from flowfin.currency.normalizer import CurrencyContext, convert
from flowfin.models import Lead, month_key
from flowfin.pipeline import LeadStage, is_open, resolve_stage

ZERO = Decimal("0")
UNKNOWN_SOURCE = "Unknown"


@dataclass
class SalesSummary:
    """Headline figures for the sales dashboard."""

    total_leads: int
    won: int
    lost: int
    qualified: int
    win_rate: Decimal  # percent, one decimal place
    pipeline_value: Decimal


@dataclass
class StageCount:
    """Number of leads at one stage label."""

    stage: str
    label: str
    count: int


@dataclass
class MonthlyRevenue:
    """Value of deals won in one YYYY-MM bucket."""

    month: str
    revenue: Decimal = ZERO


def lead_value(lead: Lead, context: CurrencyContext) -> Decimal:
    """Return a lead's value converted into the context target currency."""
    return convert(lead.value, lead.currency, context, lenient=True)


def pipeline_value(leads: list[Lead], context: CurrencyContext) -> Decimal:
    """Sum the converted values of every lead still in play."""
    return sum((lead_value(lead, context) for lead in leads if is_open(lead)), ZERO)


def win_rate(won: int, total: int) -> Decimal:
    """Percentage of all leads that were won, rounded to one decimal place."""
    if total == 0:
        return Decimal("0.0")
    rate = Decimal(won) * Decimal(100) / Decimal(total)
    return rate.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)


def summarize_sales(leads: list[Lead], context: CurrencyContext) -> SalesSummary:
    """Compute lead counts, win rate and open pipeline value."""
    stages = [resolve_stage(lead.stage) for lead in leads]
    won = stages.count(LeadStage.WON)
    return SalesSummary(
        total_leads=len(leads),
        won=won,
        lost=stages.count(LeadStage.LOST),
        qualified=stages.count(LeadStage.QUALIFIED),
        win_rate=win_rate(won, len(leads)),
        pipeline_value=pipeline_value(leads, context),
    )


def stage_counts(leads: list[Lead]) -> list[StageCount]:
    """Count leads per stage.

    Every pipeline stage is listed in board order, including empty ones,
    followed by unrecognized labels in the order they were first seen.
    """
    known: dict[LeadStage, int] = {stage: 0 for stage in LeadStage}
    unknown: dict[str, int] = {}
    for lead in leads:
        stage = resolve_stage(lead.stage)
        if stage is None:
            label = (lead.stage or "").strip()
            unknown[label] = unknown.get(label, 0) + 1
        else:
            known[stage] += 1

    counts = [
        StageCount(stage=stage.value, label=stage.label, count=count)
        for stage, count in known.items()
    ]
    counts.extend(
        StageCount(stage=label, label=label, count=count)
        for label, count in unknown.items()
    )
    return counts


def source_breakdown(leads: list[Lead]) -> dict[str, int]:
    """Count leads by acquisition source."""
    counts: dict[str, int] = {}
    for lead in leads:
        source = lead.source or UNKNOWN_SOURCE
        counts[source] = counts.get(source, 0) + 1
    return counts


def top_leads(leads: list[Lead], context: CurrencyContext, limit: int = 5) -> list[Lead]:
    """Return the most valuable leads, compared in the target currency."""
    ranked = sorted(leads, key=lambda lead: lead_value(lead, context), reverse=True)
    return ranked[:limit]


def won_revenue_by_month(leads: list[Lead], context: CurrencyContext) -> list[MonthlyRevenue]:
    """Group the value of won deals by the month the lead was created, oldest first.

    Undated leads are left out.
    """
    months: dict[str, MonthlyRevenue] = {}
    for lead in leads:
        if resolve_stage(lead.stage) is not LeadStage.WON or lead.created_at is None:
            continue
        key = month_key(lead.created_at)
        bucket = months.setdefault(key, MonthlyRevenue(month=key))
        bucket.revenue += lead_value(lead, context)
    return [months[key] for key in sorted(months)]
