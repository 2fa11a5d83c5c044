"""Dashboard aggregations over invoices, expenses and leads."""

from flowfin.reports.finance import (
    FinanceSummary,
    MonthlyTotals,
    ProjectProfit,
    Transaction,
    monthly_history,
    project_profitability,
    recent_transactions,
    summarize_finances,
)
from flowfin.reports.sales import (
    MonthlyRevenue,
    SalesSummary,
    StageCount,
    pipeline_value,
    source_breakdown,
    stage_counts,
    summarize_sales,
    top_leads,
    won_revenue_by_month,
)

__all__ = [
    "FinanceSummary",
    "MonthlyRevenue",
    "MonthlyTotals",
    "ProjectProfit",
    "SalesSummary",
    "StageCount",
    "Transaction",
    "monthly_history",
    "pipeline_value",
    "project_profitability",
    "recent_transactions",
    "source_breakdown",
    "stage_counts",
    "summarize_finances",
    "summarize_sales",
    "top_leads",
    "won_revenue_by_month",
]
