"""Monetary records read from tenant document collections.

Records arrive as loosely-typed dicts with camelCase keys. Amounts are kept
exactly as stored (number, string, or missing) so that validation happens
once, at conversion time, under the degrade-to-zero policy. Dates are
normalized here because grouping by month needs them.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any

from flowfin.exceptions import InvalidRecordError


class InvoiceStatus(str, Enum):
    """Invoice lifecycle status as stored on the record."""

    DRAFT = "Draft"
    SENT = "Sent"
    PENDING = "Pending"
    PAID = "Paid"
    OVERDUE = "Overdue"


class TransactionType(str, Enum):
    """Direction of a ledger line in the recent-transactions feed."""

    INCOME = "Income"
    EXPENSE = "Expense"


def parse_timestamp(raw: Any) -> datetime | None:
    """Read a stored timestamp as an aware UTC datetime.

    Accepts datetime/date objects, ISO 8601 strings ("2024-03-05",
    "2024-03-05T10:00:00Z"), epoch seconds, and document-store timestamp
    objects of the form {"seconds": n}. Anything else yields None.
    """
    if raw is None or raw == "":
        return None
    if isinstance(raw, datetime):
        return raw if raw.tzinfo is not None else raw.replace(tzinfo=timezone.utc)
    if isinstance(raw, date):
        return datetime(raw.year, raw.month, raw.day, tzinfo=timezone.utc)
    if isinstance(raw, dict):
        return parse_timestamp(raw.get("seconds"))
    if isinstance(raw, bool):
        return None
    if isinstance(raw, (int, float)):
        try:
            return datetime.fromtimestamp(raw, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    if isinstance(raw, str):
        try:
            parsed = datetime.fromisoformat(raw.strip().replace("Z", "+00:00"))
        except ValueError:
            return None
        return parsed if parsed.tzinfo is not None else parsed.replace(tzinfo=timezone.utc)
    return None


def month_key(moment: datetime) -> str:
    """Return the YYYY-MM bucket of a timestamp."""
    return f"{moment.year:04d}-{moment.month:02d}"


def _require_mapping(record: Any, kind: str) -> dict[str, Any]:
    if not isinstance(record, dict):
        raise InvalidRecordError(f"{kind} record must be an object, got {type(record).__name__}")
    return record


def _optional_str(value: Any) -> str | None:
    if value is None or value == "":
        return None
    return str(value)


def _tags(value: Any) -> list[str]:
    if not value:
        return []
    if isinstance(value, str):
        return [value]
    return [str(tag) for tag in value]


@dataclass
class Invoice:
    """An invoice issued by the tenant."""

    id: str
    status: str = InvoiceStatus.DRAFT.value
    total: Any = None
    currency: str | None = None
    project_id: str | None = None
    invoice_number: str | None = None
    issue_date: datetime | None = None
    due_date: datetime | None = None
    paid_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_record(cls, record: Any) -> "Invoice":
        data = _require_mapping(record, "invoice")
        return cls(
            id=str(data.get("id", "")),
            status=str(data.get("status") or InvoiceStatus.DRAFT.value),
            total=data.get("total"),
            currency=_optional_str(data.get("currency")),
            project_id=_optional_str(data.get("projectId")),
            invoice_number=_optional_str(data.get("invoiceNumber")),
            issue_date=parse_timestamp(data.get("issueDate")),
            due_date=parse_timestamp(data.get("dueDate")),
            paid_at=parse_timestamp(data.get("paidAt")),
            created_at=parse_timestamp(data.get("createdAt")),
            updated_at=parse_timestamp(data.get("updatedAt")),
        )

    @property
    def is_paid(self) -> bool:
        return self.status == InvoiceStatus.PAID

    def revenue_date(self) -> datetime | None:
        """Date a paid invoice counts towards: issue date, else paid/updated/created."""
        return self.issue_date or self.paid_at or self.updated_at or self.created_at


@dataclass
class Expense:
    """A cost recorded against the tenant, optionally tied to a project."""

    id: str
    amount: Any = None
    currency: str | None = None
    project_id: str | None = None
    description: str | None = None
    category: str | None = None
    date: datetime | None = None
    created_at: datetime | None = None

    @classmethod
    def from_record(cls, record: Any) -> "Expense":
        data = _require_mapping(record, "expense")
        return cls(
            id=str(data.get("id", "")),
            amount=data.get("amount"),
            currency=_optional_str(data.get("currency")),
            project_id=_optional_str(data.get("projectId")),
            description=_optional_str(data.get("description")),
            category=_optional_str(data.get("category")),
            date=parse_timestamp(data.get("date")),
            created_at=parse_timestamp(data.get("createdAt")),
        )

    def spend_date(self) -> datetime | None:
        return self.date or self.created_at


@dataclass
class Lead:
    """A sales-pipeline opportunity.

    ``stage`` holds the raw label; older records carry a title-case
    ``status`` ("Won") instead of a stage id ("won").
    """

    id: str
    name: str | None = None
    stage: str | None = None
    value: Any = None
    currency: str | None = None
    source: str | None = None
    owner_id: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    tags: list[str] = field(default_factory=list)

    @classmethod
    def from_record(cls, record: Any) -> "Lead":
        data = _require_mapping(record, "lead")
        return cls(
            id=str(data.get("id", "")),
            name=_optional_str(data.get("name") or data.get("company")),
            stage=_optional_str(data.get("stage") or data.get("status")),
            value=data.get("value"),
            currency=_optional_str(data.get("currency")),
            source=_optional_str(data.get("source")),
            owner_id=_optional_str(data.get("ownerId") or data.get("assignedTo")),
            created_at=parse_timestamp(data.get("createdAt")),
            updated_at=parse_timestamp(data.get("updatedAt")),
            tags=_tags(data.get("tags")),
        )
