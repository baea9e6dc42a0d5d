"""Azure Resource Graph access for the exporter and importer.

Every inventory pull in this pipeline is scoped to one subscription at a
time; the KQL itself lives in export_layer.queries.
"""

from __future__ import annotations

import logging
from typing import Any, Iterator

from azure.identity import DefaultAzureCredential
from azure.mgmt.resourcegraph import ResourceGraphClient as AzureResourceGraphClient
from azure.mgmt.resourcegraph.models import QueryRequest, QueryRequestOptions

logger = logging.getLogger(__name__)


class ResourceGraphClient:
    """Runs inventory KQL against a single subscription."""

    def __init__(self, credential: Any | None = None):
        self.credential = credential or DefaultAzureCredential()
        self._client = AzureResourceGraphClient(self.credential)

    def _pages(self, query: str, subscription_id: str) -> Iterator[list[dict[str, Any]]]:
        skip_token = None
        while True:
            request = QueryRequest(
                query=query,
                subscriptions=[subscription_id],
                options=QueryRequestOptions(result_format="objectArray", skip_token=skip_token),
            )
            response = self._client.resources(request)
            yield response.data

            skip_token = response.skip_token
            if not skip_token:
                return
            logger.debug(f"More Resource Graph results for subscription {subscription_id}")

    def query_single(self, query: str, subscription_id: str) -> list[dict[str, Any]]:
        """Return every row a query yields for one subscription.

        Resource Graph caps each response, so continuation pages are
        requested until no skip token is returned.

        Args:
            query: KQL query string.
            subscription_id: Subscription the query is scoped to.

        Returns:
            Result rows as dictionaries, in page order.
        """
        rows: list[dict[str, Any]] = []
        for page in self._pages(query, subscription_id):
            rows.extend(page)
        logger.debug(f"Resource Graph returned {len(rows)} rows for subscription {subscription_id}")
        return rows
