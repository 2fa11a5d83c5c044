"""JSON API endpoints for tenant currency settings, conversion and dashboard reports."""

from __future__ import annotations

from dataclasses import asdict, is_dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any

import structlog
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from flowfin.currency.catalogue import CURRENCIES
from flowfin.currency.normalizer import convert, format_amount, render
from flowfin.exceptions import InvalidRecordError
from flowfin.logging import bind_tenant
from flowfin.models import Expense, Invoice, Lead
from flowfin.reports import finance, sales

log = structlog.get_logger(__name__)

router = APIRouter()


def _to_json(obj: Any) -> Any:
    """Recursively convert Decimals, dates, enums and dataclasses to JSON-safe values."""
    if isinstance(obj, Decimal):
        return str(obj)
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, (datetime, date)):
        return obj.isoformat()
    if is_dataclass(obj) and not isinstance(obj, type):
        return _to_json(asdict(obj))
    if isinstance(obj, dict):
        return {k: _to_json(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [_to_json(item) for item in obj]
    return obj


def _error(message: str) -> JSONResponse:
    return JSONResponse(status_code=400, content={"error": message})


async def _read_object(request: Request) -> dict[str, Any]:
    """Parse the request body as a JSON object.

    Raises:
        InvalidRecordError: If the body is not valid JSON or not an object.
    """
    try:
        body = await request.json()
    except ValueError as e:
        raise InvalidRecordError(f"request body is not valid JSON: {e}") from e
    if not isinstance(body, dict):
        raise InvalidRecordError("request body must be a JSON object")
    return body


def _records(body: dict[str, Any], key: str) -> list[Any]:
    records = body.get(key) or []
    if not isinstance(records, list):
        raise InvalidRecordError(f"'{key}' must be a list")
    return records


@router.get("/currencies")
async def get_currencies(request: Request) -> JSONResponse:
    """Selectable currencies with their rate against the reference currency."""
    rates = request.app.state.tenants.rates
    result = [
        {
            "code": info.code,
            "label": info.label,
            "symbol": info.prefix.strip(),
            "rate": str(rates[info.code]) if info.code in rates else None,
        }
        for info in CURRENCIES
    ]
    return JSONResponse(content={"reference": rates.reference, "currencies": result})


@router.put("/tenants/{tenant_id}/settings")
async def put_tenant_settings(tenant_id: str, request: Request) -> JSONResponse:
    """Publish a new snapshot of a tenant's settings record."""
    bind_tenant(tenant_id)
    try:
        record = await _read_object(request)
    except InvalidRecordError as e:
        return _error(str(e))

    tenants = request.app.state.tenants
    tenants.feed.publish(tenant_id, record)
    log.info("tenant_settings_published", keys=sorted(record))
    return JSONResponse(content={
        "tenant_id": tenant_id,
        "currency": tenants.normalizer(tenant_id).current_target_currency(),
    })


@router.get("/tenants/{tenant_id}/currency")
async def get_tenant_currency(tenant_id: str, request: Request) -> JSONResponse:
    """The currency reports for this tenant are expressed in."""
    bind_tenant(tenant_id)
    normalizer = request.app.state.tenants.normalizer(tenant_id)
    return JSONResponse(content={
        "tenant_id": tenant_id,
        "currency": normalizer.current_target_currency(),
        "symbol": normalizer.symbol(),
    })


@router.post("/tenants/{tenant_id}/convert")
async def convert_amount(tenant_id: str, request: Request) -> JSONResponse:
    """Convert one amount into the tenant's currency.

    Invalid amounts convert to zero rather than failing the request.
    """
    bind_tenant(tenant_id)
    try:
        body = await _read_object(request)
    except InvalidRecordError as e:
        return _error(str(e))

    context = request.app.state.tenants.normalizer(tenant_id).context()
    converted = convert(body.get("amount"), body.get("currency"), context)
    return JSONResponse(content={
        "currency": context.target,
        "amount": str(converted),
        "formatted": render(converted, context),
    })


@router.post("/tenants/{tenant_id}/reports/finance")
async def finance_report(tenant_id: str, request: Request) -> JSONResponse:
    """Finance dashboard: summary, monthly history, project profitability, recent transactions."""
    bind_tenant(tenant_id)
    try:
        body = await _read_object(request)
        invoices = [Invoice.from_record(r) for r in _records(body, "invoices")]
        expenses = [Expense.from_record(r) for r in _records(body, "expenses")]
        project_names = body.get("projects") or {}
        if not isinstance(project_names, dict):
            raise InvalidRecordError("'projects' must map project ids to names")
    except InvalidRecordError as e:
        log.warning("finance_report_rejected", error=str(e))
        return _error(str(e))

    limits = request.app.state.settings.reports
    normalizer = request.app.state.tenants.normalizer(tenant_id)
    context = normalizer.context()

    summary = finance.summarize_finances(invoices, expenses, context)
    history = finance.monthly_history(invoices, expenses, context)
    projects = finance.project_profitability(
        invoices, expenses, project_names, context, limit=limits.top_projects_limit,
    )
    transactions = finance.recent_transactions(
        invoices, expenses, limit=limits.recent_transactions_limit,
    )

    log.info(
        "finance_report_built",
        currency=context.target,
        invoices=len(invoices),
        expenses=len(expenses),
    )
    return JSONResponse(content=_to_json({
        "currency": context.target,
        "summary": {
            **asdict(summary),
            "profit": summary.profit,
            "formatted": {
                "revenue": render(summary.revenue, context),
                "expenses": render(summary.expenses, context),
                "profit": render(summary.profit, context),
                "overdue": render(summary.overdue, context),
            },
        },
        "monthly": [{**asdict(m), "profit": m.profit} for m in history],
        "projects": [{**asdict(p), "profit": p.profit} for p in projects],
        "transactions": [
            {**asdict(t), "formatted": format_amount(t.amount, t.currency, context)}
            for t in transactions
        ],
    }))


@router.post("/tenants/{tenant_id}/reports/sales")
async def sales_report(tenant_id: str, request: Request) -> JSONResponse:
    """Sales dashboard: summary, stage counts, sources, top leads, won revenue by month."""
    bind_tenant(tenant_id)
    try:
        body = await _read_object(request)
        leads = [Lead.from_record(r) for r in _records(body, "leads")]
    except InvalidRecordError as e:
        log.warning("sales_report_rejected", error=str(e))
        return _error(str(e))

    limits = request.app.state.settings.reports
    normalizer = request.app.state.tenants.normalizer(tenant_id)
    context = normalizer.context()

    summary = sales.summarize_sales(leads, context)
    top = sales.top_leads(leads, context, limit=limits.top_leads_limit)

    log.info("sales_report_built", currency=context.target, leads=len(leads))
    return JSONResponse(content=_to_json({
        "currency": context.target,
        "summary": {
            **asdict(summary),
            "formatted_pipeline_value": render(summary.pipeline_value, context),
        },
        "stages": sales.stage_counts(leads),
        "sources": sales.source_breakdown(leads),
        "top_leads": [
            {
                "id": lead.id,
                "name": lead.name,
                "stage": lead.stage,
                "value": sales.lead_value(lead, context),
            }
            for lead in top
        ],
        "won_by_month": sales.won_revenue_by_month(leads, context),
    }))
