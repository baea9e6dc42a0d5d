"""Shared fixtures for the pipeline test suite.

Provides:
- In-memory fakes of the CosmosDB account / database / container proxies
- A CosmosClient wired to the fake account
- Builders for subscriptions and export results
"""

import copy
import json
from typing import Any

import pytest
from azure.cosmos.exceptions import CosmosHttpResponseError, CosmosResourceNotFoundError

from shared import CosmosClient, ExportResult, ExportSummary, Subscription
from shared.cosmos_client import get_partition_key_value


class FakeContainer:
    """Container proxy storing documents keyed by (id, partition-key value)."""

    def __init__(self, container_id: str, partition_key: dict[str, Any]):
        self.id = container_id
        self.partition_key = dict(partition_key)
        self.items: dict[tuple[str, str], dict[str, Any]] = {}
        self.fail_on: set[str] = set()
        self.upsert_calls = 0
        self.received: list[dict[str, Any]] = []

    @property
    def paths(self) -> list[str]:
        return list(self.partition_key.get("paths", []))

    def _key(self, item_id: str, pk_value: Any) -> tuple[str, str]:
        return item_id, json.dumps(pk_value)

    def read(self) -> dict[str, Any]:
        return {"id": self.id, "partitionKey": self.partition_key}

    def upsert_item(self, body: dict[str, Any]) -> dict[str, Any]:
        self.upsert_calls += 1
        self.received.append(copy.deepcopy(body))
        if body.get("id") in self.fail_on:
            raise CosmosHttpResponseError(status_code=500, message=f"Injected failure for {body['id']}")
        pk_value = get_partition_key_value(body, self.paths[0]) if self.paths else None
        stored = copy.deepcopy(body)
        stored.update({"_rid": "rid", "_etag": "etag", "_ts": 1700000000})
        self.items[self._key(body["id"], pk_value)] = stored
        return stored

    def read_item(self, item: str, partition_key: Any) -> dict[str, Any]:
        try:
            return copy.deepcopy(self.items[self._key(item, partition_key)])
        except KeyError:
            raise CosmosResourceNotFoundError(status_code=404, message=f"{item} not found")

    def read_all_items(self):
        return [copy.deepcopy(item) for item in self.items.values()]

    def documents(self) -> list[dict[str, Any]]:
        """Stored documents without system properties, sorted by id."""
        docs = [
            {k: v for k, v in item.items() if not k.startswith("_")} for item in self.items.values()
        ]
        return sorted(docs, key=lambda d: d["id"])


class FakeDatabase:
    def __init__(self, database_id: str):
        self.id = database_id
        self.containers: dict[str, FakeContainer] = {}

    def create_container_if_not_exists(self, id: str, partition_key: Any, **kwargs) -> FakeContainer:
        if id not in self.containers:
            self.containers[id] = FakeContainer(id, partition_key)
        return self.containers[id]

    def get_container_client(self, container: str) -> FakeContainer:
        if container not in self.containers:
            raise CosmosResourceNotFoundError(status_code=404, message=f"{container} not found")
        return self.containers[container]

    def list_containers(self):
        return [container.read() for container in self.containers.values()]


class FakeCosmosAccount:
    """Stands in for azure.cosmos.CosmosClient."""

    def __init__(self):
        self.databases: dict[str, FakeDatabase] = {}
        self.connections: list[dict[str, Any]] = []

    def __call__(self, url: str, credential: Any = None, **kwargs) -> "FakeCosmosAccount":
        self.connections.append({"url": url, "credential": credential, **kwargs})
        return self

    def get_database_client(self, database: str) -> FakeDatabase:
        return self.databases.setdefault(database, FakeDatabase(database))

    def create_database_if_not_exists(self, id: str, **kwargs) -> FakeDatabase:
        return self.get_database_client(id)

    def add_container(
        self, database: str, container: str, path: str, items: list[dict[str, Any]] | None = None
    ) -> FakeContainer:
        fake = self.get_database_client(database).create_container_if_not_exists(
            id=container, partition_key={"paths": [path], "kind": "Hash", "version": 2}
        )
        for item in items or []:
            fake.upsert_item(item)
        return fake


@pytest.fixture
def cosmos_account(monkeypatch):
    """Fake CosmosDB account patched in place of the SDK client."""
    account = FakeCosmosAccount()
    monkeypatch.setattr("shared.cosmos_client.AzureCosmosClient", account)
    return account


@pytest.fixture
def cosmos(cosmos_account):
    """CosmosClient bound to database 'test-db' on the fake account."""
    return CosmosClient(
        endpoint="https://test-account.documents.azure.com:443/",
        key="test-key",
        database_name="test-db",
    )


@pytest.fixture
def clean_env(monkeypatch):
    """Remove every variable the pipeline reads from the environment."""
    for name in (
        "AZURE_SUBSCRIPTION_ID",
        "AZURE_COSMOS_ENDPOINT",
        "AZURE_COSMOS_KEY",
        "AZURE_COSMOS_DATABASE_NAME",
        "VITE_COSMOS_DB_ENDPOINT",
        "VITE_COSMOS_DB_KEY",
        "VITE_COSMOS_DB_NAME",
        "AZURE_SOURCE_SUBSCRIPTION_ID",
        "AZURE_SOURCE_RESOURCE_GROUP",
        "AZURE_SOURCE_COSMOS_ENDPOINT",
        "AZURE_SOURCE_COSMOS_KEY",
        "AZURE_SOURCE_COSMOS_DATABASE",
    ):
        monkeypatch.delenv(name, raising=False)


def make_subscription(name: str, sub_id: str | None = None, tenant_id: str = "tenant-1") -> Subscription:
    return Subscription(id=sub_id or f"{name}-id", name=name, tenantId=tenant_id)


def make_resource(name: str, resource_type: str, resource_group: str = "rg-app") -> dict[str, Any]:
    return {
        "id": f"/subscriptions/sub/resourceGroups/{resource_group}/providers/{resource_type}/{name}",
        "name": name,
        "type": resource_type,
        "location": "eastus",
        "resourceGroup": resource_group,
    }


def make_export_result(
    subscription: Subscription,
    resources: list[dict[str, Any]] | None = None,
    resource_groups: int = 1,
    cosmosdb_accounts: list | None = None,
    success: bool = True,
    error: str | None = None,
) -> ExportResult:
    resources = resources or []
    counts: dict[str, int] = {}
    for resource in resources:
        counts[resource["type"]] = counts.get(resource["type"], 0) + 1
    return ExportResult(
        subscription=subscription,
        resourceGroups=[{"name": f"rg-{i}"} for i in range(resource_groups)] if success else [],
        resources=resources if success else [],
        cosmosdbAccounts=cosmosdb_accounts or [],
        summary=ExportSummary(resourcesByType=counts if success else {}),
        success=success,
        error=error,
    )
