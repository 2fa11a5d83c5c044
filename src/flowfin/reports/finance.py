"""Finance dashboard aggregations: revenue, expenses, profit, overdue and monthly history.

Every total is expressed in the context's target currency. Each record is
converted individually from its own currency before summing, so tenants
with mixed-currency invoices get a consistent figure.
"""

from dataclasses import dataclass
from datetime import date, datetime, timezone
from decimal import Decimal

from flowfin.currency.amounts import coerce_amount
from flowfin.currency.normalizer import DEFAULT_SOURCE_CURRENCY, CurrencyContext, convert
from flowfin.models import Expense, Invoice, InvoiceStatus, TransactionType, month_key

ZERO = Decimal("0")

# Sent/pending invoices become overdue once their due date has passed
_AWAITING_PAYMENT = frozenset({InvoiceStatus.SENT.value, InvoiceStatus.PENDING.value})

UNKNOWN_PROJECT = "Unknown Project"


@dataclass
class FinanceSummary:
    """Headline figures for the finance dashboard."""

    revenue: Decimal
    expenses: Decimal
    overdue: Decimal
    overdue_count: int

    @property
    def profit(self) -> Decimal:
        return self.revenue - self.expenses


@dataclass
class MonthlyTotals:
    """Revenue and expenses for one YYYY-MM bucket."""

    month: str
    revenue: Decimal = ZERO
    expenses: Decimal = ZERO

    @property
    def profit(self) -> Decimal:
        return self.revenue - self.expenses


@dataclass
class ProjectProfit:
    """Paid revenue and expenses attributed to one project."""

    project_id: str
    name: str
    revenue: Decimal = ZERO
    expenses: Decimal = ZERO

    @property
    def profit(self) -> Decimal:
        return self.revenue - self.expenses


@dataclass
class Transaction:
    """A line in the recent-transactions feed, in its original currency."""

    id: str
    type: TransactionType
    description: str
    amount: Decimal
    currency: str
    date: datetime | None
    project_id: str | None = None


def is_overdue(invoice: Invoice, today: date) -> bool:
    """True for invoices marked Overdue, or still awaiting payment past their due date."""
    if invoice.status == InvoiceStatus.OVERDUE:
        return True
    if invoice.status not in _AWAITING_PAYMENT or invoice.due_date is None:
        return False
    return invoice.due_date.date() < today


def summarize_finances(
    invoices: list[Invoice],
    expenses: list[Expense],
    context: CurrencyContext,
    today: date | None = None,
) -> FinanceSummary:
    """Compute revenue, expenses, profit and overdue totals.

    Args:
        invoices: Tenant invoices; only paid ones count as revenue.
        expenses: Tenant expenses; all of them count.
        context: Target currency and rates.
        today: Reference date for due-date checks; defaults to today (UTC).
    """
    today = today or datetime.now(timezone.utc).date()

    revenue = ZERO
    overdue = ZERO
    overdue_count = 0
    for invoice in invoices:
        amount = convert(invoice.total, invoice.currency, context)
        if invoice.is_paid:
            revenue += amount
        elif is_overdue(invoice, today):
            overdue += amount
            overdue_count += 1

    total_expenses = sum(
        (convert(expense.amount, expense.currency, context) for expense in expenses),
        ZERO,
    )

    return FinanceSummary(
        revenue=revenue,
        expenses=total_expenses,
        overdue=overdue,
        overdue_count=overdue_count,
    )


def monthly_history(
    invoices: list[Invoice],
    expenses: list[Expense],
    context: CurrencyContext,
) -> list[MonthlyTotals]:
    """Group paid revenue and expenses by month, oldest month first.

    Records without any usable date are left out.
    """
    months: dict[str, MonthlyTotals] = {}

    for invoice in invoices:
        if not invoice.is_paid:
            continue
        when = invoice.revenue_date()
        if when is None:
            continue
        key = month_key(when)
        bucket = months.setdefault(key, MonthlyTotals(month=key))
        bucket.revenue += convert(invoice.total, invoice.currency, context)

    for expense in expenses:
        when = expense.spend_date()
        if when is None:
            continue
        key = month_key(when)
        bucket = months.setdefault(key, MonthlyTotals(month=key))
        bucket.expenses += convert(expense.amount, expense.currency, context)

    return [months[key] for key in sorted(months)]


def project_profitability(
    invoices: list[Invoice],
    expenses: list[Expense],
    project_names: dict[str, str],
    context: CurrencyContext,
    limit: int = 10,
) -> list[ProjectProfit]:
    """Rank projects by paid revenue, with their expenses and profit.

    Only invoices and expenses tied to a project are counted.
    """
    projects: dict[str, ProjectProfit] = {}

    def entry(project_id: str) -> ProjectProfit:
        if project_id not in projects:
            projects[project_id] = ProjectProfit(
                project_id=project_id,
                name=project_names.get(project_id, UNKNOWN_PROJECT),
            )
        return projects[project_id]

    for invoice in invoices:
        if invoice.is_paid and invoice.project_id:
            entry(invoice.project_id).revenue += convert(invoice.total, invoice.currency, context)

    for expense in expenses:
        if expense.project_id:
            entry(expense.project_id).expenses += convert(expense.amount, expense.currency, context)

    ranked = sorted(projects.values(), key=lambda p: p.revenue, reverse=True)
    return ranked[:limit]


def recent_transactions(
    invoices: list[Invoice],
    expenses: list[Expense],
    limit: int = 10,
) -> list[Transaction]:
    """Merge invoices and expenses into one feed, newest first.

    Amounts stay in their own currency; the feed is formatted per line at
    display time. Undated lines sort last.
    """
    lines: list[Transaction] = []
    for invoice in invoices:
        number = invoice.invoice_number or invoice.id
        lines.append(Transaction(
            id=invoice.id,
            type=TransactionType.INCOME,
            description=f"Invoice #{number}",
            amount=coerce_amount(invoice.total),
            currency=invoice.currency or DEFAULT_SOURCE_CURRENCY,
            date=invoice.issue_date or invoice.created_at,
            project_id=invoice.project_id,
        ))
    for expense in expenses:
        lines.append(Transaction(
            id=expense.id,
            type=TransactionType.EXPENSE,
            description=expense.description or "Expense",
            amount=coerce_amount(expense.amount),
            currency=expense.currency or DEFAULT_SOURCE_CURRENCY,
            date=expense.spend_date(),
            project_id=expense.project_id,
        ))

    epoch = datetime.min.replace(tzinfo=timezone.utc)
    lines.sort(key=lambda t: t.date or epoch, reverse=True)
    return lines[:limit]
