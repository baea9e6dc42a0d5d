"""Tests for subscription enumeration and selection."""

from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
from azure.core.exceptions import ClientAuthenticationError

from conftest import make_subscription
from shared import (
    AuthenticationRequiredError,
    SubscriptionNotFoundError,
    find_subscription,
    list_enabled_subscriptions,
    select_subscriptions,
)


def _raw(sub_id, name, state="Enabled"):
    return SimpleNamespace(subscription_id=sub_id, display_name=name, tenant_id="t1", state=state)


class TestListEnabledSubscriptions:
    def test_filters_to_enabled(self):
        client = MagicMock()
        client.subscriptions.list.return_value = [
            _raw("1", "dev"),
            _raw("2", "old", state="Disabled"),
            _raw("3", "prod", state=SimpleNamespace(value="Enabled")),
        ]

        subscriptions = list_enabled_subscriptions(credential=None, client=client)

        assert [s.name for s in subscriptions] == ["dev", "prod"]
        assert subscriptions[0].tenant_id == "t1"

    def test_authentication_failure(self):
        client = MagicMock()
        client.subscriptions.list.side_effect = ClientAuthenticationError("no token")

        with pytest.raises(AuthenticationRequiredError):
            list_enabled_subscriptions(credential=None, client=client)


class TestSelectSubscriptions:
    @pytest.fixture
    def subscriptions(self):
        return [
            make_subscription("dev-west", "aaaa-1111"),
            make_subscription("prod-east", "bbbb-2222"),
            make_subscription("prod-west", "cccc-3333"),
        ]

    def test_partial_name_selects_first_match(self, subscriptions):
        selected = select_subscriptions(subscriptions, subscription="prod")
        assert [s.name for s in selected] == ["prod-east"]

    def test_name_match_is_case_insensitive(self, subscriptions):
        assert find_subscription(subscriptions, "PROD-WEST").id == "cccc-3333"

    def test_id_substring(self, subscriptions):
        assert select_subscriptions(subscriptions, subscription="2222")[0].name == "prod-east"

    def test_selector_not_found_lists_available(self, subscriptions):
        with pytest.raises(SubscriptionNotFoundError) as exc_info:
            select_subscriptions(subscriptions, subscription="staging")
        assert exc_info.value.available == subscriptions

    def test_all_subscriptions(self, subscriptions):
        assert select_subscriptions(subscriptions, all_subscriptions=True) == subscriptions

    def test_default_subscription(self, subscriptions):
        selected = select_subscriptions(subscriptions, default_subscription_id="cccc-3333")
        assert selected[0].name == "prod-west"

    def test_falls_back_to_first(self, subscriptions, clean_env):
        assert select_subscriptions(subscriptions)[0].name == "dev-west"

    def test_no_subscriptions(self):
        with pytest.raises(SubscriptionNotFoundError):
            select_subscriptions([], all_subscriptions=True)
