"""FastAPI reporting application factory."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from flowfin.config import AppSettings
from flowfin.currency.normalizer import CurrencyNormalizer
from flowfin.currency.preference import CurrencyPreference, InMemorySettingsFeed, UserProfile
from flowfin.currency.rates import ExchangeRateTable
from flowfin.dashboard.routes import api
from flowfin.logging import get_logger

logger = get_logger(__name__)


class TenantRegistry:
    """One live currency preference per tenant, created on first use.

    Each preference stays subscribed to the settings feed until shutdown,
    so a settings update applies to the next report request.
    """

    def __init__(self, settings: AppSettings, feed: InMemorySettingsFeed) -> None:
        self._settings = settings
        self._feed = feed
        self._rates = settings.currency.build_rate_table()
        self._preferences: dict[str, CurrencyPreference] = {}

    @property
    def rates(self) -> ExchangeRateTable:
        return self._rates

    @property
    def feed(self) -> InMemorySettingsFeed:
        return self._feed

    def normalizer(self, tenant_id: str) -> CurrencyNormalizer:
        preference = self._preferences.get(tenant_id)
        if preference is None:
            preference = CurrencyPreference(
                self._feed,
                UserProfile(user_id=f"api:{tenant_id}", company_id=tenant_id),
                default_currency=self._settings.currency.default_currency,
            )
            preference.activate()
            self._preferences[tenant_id] = preference
        return CurrencyNormalizer(
            preference,
            self._rates,
            max_fraction_digits=self._settings.currency.max_fraction_digits,
            min_fraction_digits=self._settings.currency.min_fraction_digits,
        )

    def close(self) -> None:
        for preference in self._preferences.values():
            preference.deactivate()
        self._preferences.clear()


def create_dashboard_app(
    settings: AppSettings | None = None,
    feed: InMemorySettingsFeed | None = None,
) -> FastAPI:
    """Create and configure the reporting application.

    Args:
        settings: Application settings; loaded from the environment when omitted.
        feed: Tenant settings feed; a fresh in-memory feed when omitted.

    Returns:
        Configured FastAPI application with the JSON API mounted under /api.
    """
    settings = settings or AppSettings()
    tenants = TenantRegistry(settings, feed or InMemorySettingsFeed())

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        logger.info("reporting_api_started", rates=len(tenants.rates))
        yield
        tenants.close()
        logger.info("reporting_api_stopped")

    app = FastAPI(title="Flow Financial Reports", lifespan=lifespan)
    app.state.settings = settings
    app.state.tenants = tenants

    app.include_router(api.router, prefix="/api")
    return app

