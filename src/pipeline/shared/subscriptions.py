"""Subscription enumeration and selection.

The credential is always passed in explicitly. Nothing here depends on an
"active" subscription held by the Azure CLI.
"""

from __future__ import annotations

import logging
import os
from typing import Any

from azure.core.exceptions import ClientAuthenticationError
from azure.identity import CredentialUnavailableError, DefaultAzureCredential
from azure.mgmt.subscription import SubscriptionClient

from shared.exceptions import AuthenticationRequiredError, SubscriptionNotFoundError
from shared.models import Subscription, SubscriptionState

logger = logging.getLogger(__name__)


def get_credential() -> Any:
    """Return the credential used by every Azure SDK client in a run.

    DefaultAzureCredential tries environment variables, managed identity and
    the Azure CLI login, in that order.
    """
    return DefaultAzureCredential()


def _state_value(state: Any) -> str:
    return getattr(state, "value", state) or ""


def list_enabled_subscriptions(
    credential: Any,
    client: SubscriptionClient | None = None,
) -> list[Subscription]:
    """List subscriptions reachable by the credential whose state is Enabled.

    Args:
        credential: Azure credential.
        client: Optional pre-built SubscriptionClient.

    Returns:
        Enabled subscriptions, in the order the service returns them.

    Raises:
        AuthenticationRequiredError: If the credential cannot authenticate.
    """
    client = client or SubscriptionClient(credential)

    try:
        raw_subscriptions = list(client.subscriptions.list())
    except (ClientAuthenticationError, CredentialUnavailableError) as e:
        raise AuthenticationRequiredError(
            f"Not authenticated to Azure ({e}). Run 'az login' or configure a service principal."
        ) from e

    subscriptions = [
        Subscription(
            id=sub.subscription_id,
            name=sub.display_name,
            tenantId=sub.tenant_id,
            state=_state_value(sub.state),
        )
        for sub in raw_subscriptions
    ]
    enabled = [s for s in subscriptions if s.state == SubscriptionState.ENABLED.value]

    logger.info(f"Found {len(enabled)} enabled subscription(s) of {len(subscriptions)}")
    return enabled


def matches_subscription(subscription: Subscription, selector: str) -> bool:
    """Match by exact id, exact name, id substring or case-insensitive name substring."""
    return (
        subscription.id == selector
        or subscription.name == selector
        or selector in subscription.id
        or selector.lower() in subscription.name.lower()
    )


def find_subscription(subscriptions: list[Subscription], selector: str) -> Subscription | None:
    """Return the first subscription matching the selector, in input order."""
    return next((s for s in subscriptions if matches_subscription(s, selector)), None)


def select_subscriptions(
    subscriptions: list[Subscription],
    all_subscriptions: bool = False,
    subscription: str | None = None,
    default_subscription_id: str | None = None,
) -> list[Subscription]:
    """Decide which subscriptions an export run processes.

    Args:
        subscriptions: Enabled subscriptions.
        all_subscriptions: Process every enabled subscription.
        subscription: Selector for a single subscription (id or name).
        default_subscription_id: Subscription used when no selector is given.
            Defaults to the AZURE_SUBSCRIPTION_ID environment variable.

    Returns:
        Subscriptions to export, in input order.

    Raises:
        SubscriptionNotFoundError: If there are no enabled subscriptions or the
            selector matches none of them.
    """
    if not subscriptions:
        raise SubscriptionNotFoundError("No enabled subscriptions found")

    if subscription:
        target = find_subscription(subscriptions, subscription)
        if target is None:
            raise SubscriptionNotFoundError(
                f'Subscription "{subscription}" not found', available=subscriptions
            )
        logger.info(f"Processing specific subscription: {target.name}")
        return [target]

    if all_subscriptions:
        logger.info(f"Processing ALL {len(subscriptions)} enabled subscriptions")
        if len(subscriptions) > 5:
            logger.warning("Many subscriptions selected - this may take a while")
        return list(subscriptions)

    default_id = default_subscription_id or os.environ.get("AZURE_SUBSCRIPTION_ID")
    current = next((s for s in subscriptions if s.id == default_id), None) if default_id else None
    selected = current or subscriptions[0]
    logger.info(f"Processing current subscription only: {selected.name}")
    return [selected]
