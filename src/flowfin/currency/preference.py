"""Tenant currency preference observed through a push feed of settings snapshots.

The tenant's settings record lives in an external document store. A
SettingsFeed delivers a snapshot of that record when a subscription starts
and again after every change. CurrencyPreference keeps the latest currency
seen while it is active and falls back to the user's own preference, then
to the configured default, when no tenant value is available.
"""

from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from flowfin.logging import get_logger

logger = get_logger(__name__)

Snapshot = dict[str, Any] | None
SnapshotHandler = Callable[[Snapshot], None]
Unsubscribe = Callable[[], None]


@dataclass(frozen=True)
class UserProfile:
    """The signed-in user as far as currency selection is concerned."""

    user_id: str
    company_id: str | None = None
    currency: str | None = None


class SettingsFeed(ABC):
    """Push source of tenant settings snapshots."""

    @abstractmethod
    def subscribe(self, tenant_id: str, on_snapshot: SnapshotHandler) -> Unsubscribe:
        """Start receiving snapshots of a tenant's settings record.

        A snapshot of None means the record does not exist. The returned
        callable stops delivery.
        """
        ...


class InMemorySettingsFeed(SettingsFeed):
    """In-process settings feed.

    Stores the latest record per tenant, delivers it to new subscribers
    immediately, and pushes every published record to current subscribers.
    """

    def __init__(self) -> None:
        self._records: dict[str, dict[str, Any]] = {}
        self._subscribers: dict[str, list[SnapshotHandler]] = {}

    def subscribe(self, tenant_id: str, on_snapshot: SnapshotHandler) -> Unsubscribe:
        handlers = self._subscribers.setdefault(tenant_id, [])
        handlers.append(on_snapshot)
        logger.debug("settings_feed_subscribed", tenant_id=tenant_id, subscribers=len(handlers))
        on_snapshot(self.get(tenant_id))

        def unsubscribe() -> None:
            if on_snapshot in handlers:
                handlers.remove(on_snapshot)
                logger.debug("settings_feed_unsubscribed", tenant_id=tenant_id)

        return unsubscribe

    def publish(self, tenant_id: str, record: dict[str, Any] | None) -> None:
        """Replace a tenant's settings record and notify subscribers.

        Publishing None deletes the record.
        """
        if record is None:
            self._records.pop(tenant_id, None)
        else:
            self._records[tenant_id] = dict(record)

        snapshot = self.get(tenant_id)
        for handler in list(self._subscribers.get(tenant_id, [])):
            handler(snapshot)

    def get(self, tenant_id: str) -> Snapshot:
        record = self._records.get(tenant_id)
        return dict(record) if record is not None else None

    def subscriber_count(self, tenant_id: str) -> int:
        return len(self._subscribers.get(tenant_id, []))


class CurrencyPreference:
    """Reactive holder of a tenant's display currency.

    Resolution order for the target currency:
    1. The tenant settings record, while a subscription is active
    2. The user's own currency preference
    3. ``default_currency``

    Args:
        feed: Source of tenant settings snapshots.
        user: Signed-in user; ``company_id`` selects the tenant.
        default_currency: Last-resort currency code.
    """

    def __init__(
        self,
        feed: SettingsFeed,
        user: UserProfile,
        default_currency: str = "USD",
    ) -> None:
        self._feed = feed
        self._user = user
        self._default_currency = default_currency
        self._tenant_currency: str | None = None
        self._unsubscribe: Unsubscribe | None = None
        self._listeners: list[Callable[[str], None]] = []

    @property
    def is_active(self) -> bool:
        return self._unsubscribe is not None

    @property
    def user(self) -> UserProfile:
        return self._user

    def activate(self) -> None:
        """Start observing the tenant's settings record.

        Users without a tenant keep their own preference and nothing is
        subscribed.
        """
        if self._unsubscribe is not None:
            logger.warning("currency_preference_already_active", tenant_id=self._user.company_id)
            return
        if not self._user.company_id:
            logger.debug("currency_preference_no_tenant", user_id=self._user.user_id)
            return
        self._unsubscribe = self._feed.subscribe(self._user.company_id, self._on_snapshot)
        logger.info(
            "currency_preference_activated",
            tenant_id=self._user.company_id,
            currency=self.current_target_currency(),
        )

    def deactivate(self) -> None:
        """Stop observing and forget the tenant value."""
        if self._unsubscribe is None:
            return
        self._unsubscribe()
        self._unsubscribe = None
        self._tenant_currency = None
        logger.info("currency_preference_deactivated", tenant_id=self._user.company_id)

    def add_listener(self, callback: Callable[[str], None]) -> Callable[[], None]:
        """Call ``callback`` with the new target currency after each change.

        Returns a callable that removes the listener.
        """
        self._listeners.append(callback)

        def remove() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return remove

    def current_target_currency(self) -> str:
        if self._unsubscribe is not None and self._tenant_currency:
            return self._tenant_currency
        if self._user.currency:
            return self._user.currency
        return self._default_currency

    def _on_snapshot(self, snapshot: Snapshot) -> None:
        if snapshot is None:
            logger.debug("tenant_settings_missing", tenant_id=self._user.company_id)
            return
        currency = snapshot.get("currency")
        if currency is not None and not isinstance(currency, str):
            logger.warning(
                "tenant_currency_ignored",
                tenant_id=self._user.company_id,
                currency=repr(currency),
            )
            return
        if not currency or currency == self._tenant_currency:
            return

        previous = self.current_target_currency()
        self._tenant_currency = currency
        logger.info(
            "tenant_currency_changed",
            tenant_id=self._user.company_id,
            previous=previous,
            currency=currency,
        )
        self._notify(currency)

    def _notify(self, currency: str) -> None:
        for listener in list(self._listeners):
            try:
                listener(currency)
            except Exception:
                logger.warning("currency_listener_error", currency=currency, exc_info=True)
