"""Per-subscription inventory export.

Each subscription is exported independently. Resource groups and resources
are required; CosmosDB accounts, their keys and security assessments are
optional enrichments whose failures are recorded on the result instead of
aborting the export.
"""

from __future__ import annotations

import logging
from typing import Any, Callable

from azure.mgmt.cosmosdb import CosmosDBManagementClient

from shared import (
    CosmosAccount,
    CosmosConnectionInfo,
    ExportResult,
    ExportSummary,
    ResourceGraphClient,
    Subscription,
    summarize_by_resource_type,
)
from export_layer.queries import (
    query_cosmosdb_accounts,
    query_resource_groups,
    query_resources,
    query_security_assessments,
)

logger = logging.getLogger(__name__)

CosmosManagementFactory = Callable[[Any, str], Any]


class SubscriptionExporter:
    """Exports the inventory of one subscription at a time."""

    def __init__(
        self,
        credential: Any,
        graph_client: ResourceGraphClient | None = None,
        cosmos_management_factory: CosmosManagementFactory | None = None,
    ):
        """Initialize the exporter.

        Args:
            credential: Azure credential shared by every client.
            graph_client: Resource Graph client. Defaults to one built from credential.
            cosmos_management_factory: Callable (credential, subscription_id) returning
                a CosmosDB management client. Defaults to CosmosDBManagementClient.
        """
        self.credential = credential
        self.graph_client = graph_client or ResourceGraphClient(credential)
        self.cosmos_management_factory = cosmos_management_factory or CosmosDBManagementClient

    def export(self, subscription: Subscription, index: int = 0, total: int = 1) -> ExportResult:
        """Export resource groups, resources, CosmosDB accounts and security assessments.

        Args:
            subscription: Subscription to export.
            index: Position of this subscription in the run (for progress logs).
            total: Number of subscriptions in the run.

        Returns:
            ExportResult. `success` is False only when resource groups or
            resources could not be listed.
        """
        prefix = f"[{index + 1}/{total}] " if total > 1 else ""
        logger.info(f"{prefix}Processing subscription: {subscription.name} ({subscription.id})")

        try:
            resource_groups = self.graph_client.query_single(query_resource_groups(), subscription.id)
            logger.info(f"Found {len(resource_groups)} resource groups")

            resources = self.graph_client.query_single(query_resources(), subscription.id)
            logger.info(f"Found {len(resources)} resources")
        except Exception as e:
            logger.error(f"Error exporting {subscription.name}: {e}")
            return ExportResult(subscription=subscription, success=False, error=str(e))

        cosmosdb_accounts, cosmosdb_error = self._export_cosmosdb_accounts(subscription)
        security_assessments, security_error = self._export_security_assessments(subscription)

        logger.info(f"Completed export for {subscription.name}")
        return ExportResult(
            subscription=subscription,
            resourceGroups=resource_groups,
            resources=resources,
            cosmosdbAccounts=cosmosdb_accounts,
            securityAssessments=security_assessments,
            summary=ExportSummary(resourcesByType=summarize_by_resource_type(resources)),
            success=True,
            cosmosdbError=cosmosdb_error,
            securityError=security_error,
        )

    def _export_cosmosdb_accounts(
        self, subscription: Subscription
    ) -> tuple[list[CosmosAccount], str | None]:
        """List CosmosDB accounts and fetch keys for each one.

        Returns:
            Accounts (empty on failure) and the listing error message, if any.
        """
        try:
            rows = self.graph_client.query_single(query_cosmosdb_accounts(), subscription.id)
            accounts = [CosmosAccount(**row) for row in rows]
        except Exception as e:
            logger.warning(f"No CosmosDB accounts or insufficient permissions: {e}")
            return [], str(e)

        logger.info(f"Found {len(accounts)} CosmosDB accounts")
        if not accounts:
            return accounts, None

        try:
            management_client = self.cosmos_management_factory(self.credential, subscription.id)
        except Exception as e:
            logger.warning(f"Could not create CosmosDB management client: {e}")
            return accounts, f"Could not create CosmosDB management client: {e}"

        for account in accounts:
            account.connection_info = self._fetch_keys(management_client, account)
        return accounts, None

    def _fetch_keys(self, management_client: Any, account: CosmosAccount) -> CosmosConnectionInfo | None:
        """Fetch account keys; a failure degrades only this account."""
        try:
            keys = management_client.database_accounts.list_keys(
                resource_group_name=account.resource_group,
                account_name=account.name,
            )
        except Exception as e:
            logger.warning(f"Could not get keys for {account.name} (insufficient permissions): {e}")
            return None

        logger.info(f"Got keys for {account.name}")
        return CosmosConnectionInfo(
            endpoint=account.document_endpoint,
            primaryKey=keys.primary_master_key,
            secondaryKey=keys.secondary_master_key,
        )

    def _export_security_assessments(
        self, subscription: Subscription
    ) -> tuple[list[dict[str, Any]], str | None]:
        try:
            assessments = self.graph_client.query_single(
                query_security_assessments(), subscription.id
            )
        except Exception as e:
            logger.warning(
                f"Could not export security assessments (insufficient permissions or not enabled): {e}"
            )
            return [], str(e)

        logger.info(f"Found {len(assessments)} security assessments")
        return assessments, None


def export_subscriptions(
    exporter: SubscriptionExporter,
    subscriptions: list[Subscription],
    on_result: Callable[[ExportResult], None] | None = None,
) -> list[ExportResult]:
    """Export subscriptions sequentially, in order.

    Args:
        exporter: Exporter to use.
        subscriptions: Subscriptions to process.
        on_result: Optional callback invoked with each result as it completes.

    Returns:
        One ExportResult per subscription, in input order.
    """
    results: list[ExportResult] = []
    for index, subscription in enumerate(subscriptions):
        result = exporter.export(subscription, index, len(subscriptions))
        if on_result:
            on_result(result)
        results.append(result)
    return results
