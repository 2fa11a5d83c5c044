"""Tests for the reactive tenant currency preference and the in-memory settings feed."""

import pytest

from flowfin.currency.preference import CurrencyPreference, InMemorySettingsFeed, UserProfile


@pytest.fixture
def feed() -> InMemorySettingsFeed:
    return InMemorySettingsFeed()


def _preference(
    feed: InMemorySettingsFeed,
    company_id: str | None = "acme",
    currency: str | None = None,
    default: str = "USD",
) -> CurrencyPreference:
    user = UserProfile(user_id="u1", company_id=company_id, currency=currency)
    return CurrencyPreference(feed, user, default_currency=default)


class TestFallbackChain:
    def test_default_when_nothing_set(self, feed: InMemorySettingsFeed) -> None:
        pref = _preference(feed, company_id=None)
        pref.activate()
        assert pref.current_target_currency() == "USD"
        assert not pref.is_active

    def test_configured_default(self, feed: InMemorySettingsFeed) -> None:
        pref = _preference(feed, company_id=None, default="EUR")
        assert pref.current_target_currency() == "EUR"

    def test_user_preference_without_tenant(self, feed: InMemorySettingsFeed) -> None:
        pref = _preference(feed, company_id=None, currency="GBP")
        pref.activate()
        assert pref.current_target_currency() == "GBP"
        assert feed.subscriber_count("acme") == 0

    def test_user_preference_before_activation(self, feed: InMemorySettingsFeed) -> None:
        feed.publish("acme", {"currency": "EUR"})
        pref = _preference(feed, currency="GBP")
        assert pref.current_target_currency() == "GBP"

    def test_tenant_record_without_currency(self, feed: InMemorySettingsFeed) -> None:
        feed.publish("acme", {"name": "Acme"})
        pref = _preference(feed, currency="INR")
        pref.activate()
        assert pref.current_target_currency() == "INR"

    def test_missing_tenant_record(self, feed: InMemorySettingsFeed) -> None:
        pref = _preference(feed)
        pref.activate()
        assert pref.is_active
        assert pref.current_target_currency() == "USD"


class TestSubscription:
    def test_reads_tenant_currency_on_activation(self, feed: InMemorySettingsFeed) -> None:
        feed.publish("acme", {"currency": "EUR"})
        pref = _preference(feed, currency="GBP")
        pref.activate()
        assert pref.current_target_currency() == "EUR"
        assert feed.subscriber_count("acme") == 1

    def test_follows_updates(self, feed: InMemorySettingsFeed) -> None:
        pref = _preference(feed)
        pref.activate()
        feed.publish("acme", {"currency": "JPY"})
        assert pref.current_target_currency() == "JPY"
        feed.publish("acme", {"currency": "AUD"})
        assert pref.current_target_currency() == "AUD"

    def test_ignores_other_tenants(self, feed: InMemorySettingsFeed) -> None:
        pref = _preference(feed)
        pref.activate()
        feed.publish("globex", {"currency": "EUR"})
        assert pref.current_target_currency() == "USD"

    def test_keeps_last_value_when_record_loses_currency(self, feed: InMemorySettingsFeed) -> None:
        feed.publish("acme", {"currency": "EUR"})
        pref = _preference(feed)
        pref.activate()

        feed.publish("acme", {"currency": ""})
        assert pref.current_target_currency() == "EUR"
        feed.publish("acme", None)
        assert pref.current_target_currency() == "EUR"

    def test_ignores_non_string_currency(self, feed: InMemorySettingsFeed) -> None:
        feed.publish("acme", {"currency": "EUR"})
        pref = _preference(feed)
        pref.activate()

        feed.publish("acme", {"currency": ["GBP"]})
        assert pref.current_target_currency() == "EUR"

    def test_activate_twice_subscribes_once(self, feed: InMemorySettingsFeed) -> None:
        pref = _preference(feed)
        pref.activate()
        pref.activate()
        assert feed.subscriber_count("acme") == 1

    def test_deactivate_drops_tenant_value(self, feed: InMemorySettingsFeed) -> None:
        feed.publish("acme", {"currency": "EUR"})
        pref = _preference(feed, currency="GBP")
        pref.activate()
        pref.deactivate()

        assert not pref.is_active
        assert feed.subscriber_count("acme") == 0
        assert pref.current_target_currency() == "GBP"

        feed.publish("acme", {"currency": "JPY"})
        assert pref.current_target_currency() == "GBP"

    def test_deactivate_when_inactive_is_noop(self, feed: InMemorySettingsFeed) -> None:
        pref = _preference(feed)
        pref.deactivate()
        assert not pref.is_active

    def test_reactivation_reads_latest_record(self, feed: InMemorySettingsFeed) -> None:
        feed.publish("acme", {"currency": "EUR"})
        pref = _preference(feed)
        pref.activate()
        pref.deactivate()
        feed.publish("acme", {"currency": "SGD"})
        pref.activate()
        assert pref.current_target_currency() == "SGD"


class TestListeners:
    def test_notified_on_change_only(self, feed: InMemorySettingsFeed) -> None:
        seen: list[str] = []
        pref = _preference(feed)
        pref.add_listener(seen.append)
        pref.activate()

        feed.publish("acme", {"currency": "EUR"})
        feed.publish("acme", {"currency": "EUR", "name": "renamed"})
        feed.publish("acme", {"currency": "GBP"})

        assert seen == ["EUR", "GBP"]

    def test_remove_listener(self, feed: InMemorySettingsFeed) -> None:
        seen: list[str] = []
        pref = _preference(feed)
        remove = pref.add_listener(seen.append)
        pref.activate()
        remove()
        feed.publish("acme", {"currency": "EUR"})
        assert seen == []

    def test_failing_listener_does_not_block_others(self, feed: InMemorySettingsFeed) -> None:
        seen: list[str] = []

        def broken(currency: str) -> None:
            raise RuntimeError("render failed")

        pref = _preference(feed)
        pref.add_listener(broken)
        pref.add_listener(seen.append)
        pref.activate()
        feed.publish("acme", {"currency": "CAD"})

        assert seen == ["CAD"]
        assert pref.current_target_currency() == "CAD"


class TestInMemorySettingsFeed:
    def test_new_subscriber_gets_current_snapshot(self, feed: InMemorySettingsFeed) -> None:
        feed.publish("acme", {"currency": "EUR"})
        received: list = []
        feed.subscribe("acme", received.append)
        assert received == [{"currency": "EUR"}]

    def test_subscriber_gets_none_for_missing_record(self, feed: InMemorySettingsFeed) -> None:
        received: list = []
        feed.subscribe("acme", received.append)
        assert received == [None]

    def test_snapshots_are_copies(self, feed: InMemorySettingsFeed) -> None:
        record = {"currency": "EUR"}
        feed.publish("acme", record)
        record["currency"] = "GBP"
        snapshot = feed.get("acme")
        assert snapshot == {"currency": "EUR"}
        snapshot["currency"] = "JPY"
        assert feed.get("acme") == {"currency": "EUR"}

    def test_unsubscribe_is_idempotent(self, feed: InMemorySettingsFeed) -> None:
        received: list = []
        unsubscribe = feed.subscribe("acme", received.append)
        unsubscribe()
        unsubscribe()
        feed.publish("acme", {"currency": "EUR"})
        assert received == [None]
        assert feed.subscriber_count("acme") == 0
