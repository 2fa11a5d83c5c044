"""Lead pipeline stages and board grouping.

Stages are free-form on the board: a lead may be dragged from any stage to
any other. Two labelling conventions exist in stored leads, lowercase stage
ids ("proposal") and title-case statuses ("Proposal", "Proposal Sent"), so
every label goes through resolve_stage before it is compared.
"""

from dataclasses import dataclass, replace
from datetime import datetime, timezone
from enum import Enum

from flowfin.exceptions import InvalidStageError
from flowfin.logging import get_logger
from flowfin.models import Lead

logger = get_logger(__name__)


class LeadStage(str, Enum):
    """Pipeline stage, in board order."""

    NEW = "new"
    CONTACTED = "contacted"
    QUALIFIED = "qualified"
    PROPOSAL = "proposal"
    NEGOTIATION = "negotiation"
    WON = "won"
    LOST = "lost"

    @property
    def label(self) -> str:
        """Column heading shown on the board."""
        return _TITLES[self]


_TITLES: dict[LeadStage, str] = {
    LeadStage.NEW: "New Lead",
    LeadStage.CONTACTED: "Contacted",
    LeadStage.QUALIFIED: "Qualified",
    LeadStage.PROPOSAL: "Proposal Sent",
    LeadStage.NEGOTIATION: "Negotiation",
    LeadStage.WON: "Closed Won",
    LeadStage.LOST: "Closed Lost",
}

_ALIASES: dict[str, LeadStage] = {
    **{stage.value: stage for stage in LeadStage},
    **{title.lower(): stage for stage, title in _TITLES.items()},
    "proposal sent": LeadStage.PROPOSAL,
    "closed won": LeadStage.WON,
    "closed lost": LeadStage.LOST,
}

CLOSED_STAGES = frozenset({LeadStage.WON, LeadStage.LOST})


def resolve_stage(label: str | None) -> LeadStage | None:
    """Map a stored stage label to a LeadStage.

    Empty labels mean a freshly created lead (NEW). Unknown labels return None.
    """
    if not label or not label.strip():
        return LeadStage.NEW
    return _ALIASES.get(label.strip().lower())


def is_open(lead: Lead) -> bool:
    """True while a lead is neither won nor lost."""
    return resolve_stage(lead.stage) not in CLOSED_STAGES


@dataclass
class StageColumn:
    """One board column."""

    stage: LeadStage
    leads: list[Lead]

    @property
    def title(self) -> str:
        return self.stage.label

    @property
    def count(self) -> int:
        return len(self.leads)


def group_by_stage(leads: list[Lead]) -> list[StageColumn]:
    """Split leads into board columns, one per stage in board order.

    Leads whose stage label is not recognized appear in no column.
    """
    columns = {stage: StageColumn(stage=stage, leads=[]) for stage in LeadStage}
    for lead in leads:
        stage = resolve_stage(lead.stage)
        if stage is None:
            logger.debug("lead_stage_unrecognized", lead_id=lead.id, stage=lead.stage)
            continue
        columns[stage].leads.append(lead)
    return list(columns.values())


def move_lead(lead: Lead, stage: LeadStage | str, now: datetime | None = None) -> Lead:
    """Return a copy of ``lead`` placed in ``stage``.

    Args:
        lead: The lead being moved.
        stage: Target stage, as a LeadStage or any recognized label.
        now: Time recorded as ``updated_at``; defaults to the current UTC time.

    Raises:
        InvalidStageError: If ``stage`` is not a known pipeline stage.
    """
    target = stage if isinstance(stage, LeadStage) else resolve_stage(stage)
    if target is None or (isinstance(stage, str) and not stage.strip()):
        raise InvalidStageError(f"unknown pipeline stage: {stage!r}")

    moved = replace(
        lead,
        stage=target.value,
        updated_at=now or datetime.now(timezone.utc),
    )
    logger.info(
        "lead_stage_changed",
        lead_id=lead.id,
        previous=lead.stage,
        stage=target.value,
    )
    return moved
