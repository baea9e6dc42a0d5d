"""Cosmos DB client wrapper with key or managed identity authentication."""

from __future__ import annotations

import logging
import os
from typing import Any, Iterable
from urllib.parse import urlparse

from azure.cosmos import CosmosClient as AzureCosmosClient
from azure.cosmos import PartitionKey
from azure.cosmos.exceptions import CosmosResourceNotFoundError
from azure.identity import DefaultAzureCredential

from shared.exceptions import ConfigurationError, PartitionKeyError
from shared.models import ContainerDefinition, ItemFailure, UpsertResult

logger = logging.getLogger(__name__)

DEFAULT_DATABASE_NAME = "cato-dashboard"

# CosmosDB adds these to every document; they are not copied between accounts
SYSTEM_PROPERTIES = ("_rid", "_self", "_etag", "_attachments", "_ts")

EMULATOR_HOSTS = ("localhost", "127.0.0.1")


def is_emulator_endpoint(endpoint: str) -> bool:
    """Return True when the endpoint points at a local Cosmos DB Emulator."""
    return urlparse(endpoint).hostname in EMULATOR_HOSTS


def strip_system_properties(item: dict[str, Any]) -> dict[str, Any]:
    """Return a copy of a document without CosmosDB system properties."""
    return {key: value for key, value in item.items() if key not in SYSTEM_PROPERTIES}


def get_partition_key_value(item: dict[str, Any], path: str) -> Any:
    """Resolve a partition-key path such as '/tenantId' or '/a/b' against a document.

    Returns:
        The value at the path, or None if any segment is missing.
    """
    value: Any = item
    for segment in path.strip("/").split("/"):
        if not isinstance(value, dict) or segment not in value:
            return None
        value = value[segment]
    return value


def _partition_key_paths(definition: dict[str, Any] | str | None) -> list[str]:
    if definition is None:
        return []
    if isinstance(definition, str):
        return [definition]
    return list(definition.get("paths", []))


def _to_partition_key(definition: dict[str, Any] | str) -> PartitionKey:
    """Build a PartitionKey from a path or a container's partitionKey properties."""
    if isinstance(definition, str):
        return PartitionKey(path=definition)
    paths = definition.get("paths", [])
    kind = definition.get("kind", "Hash")
    version = definition.get("version", 2)
    path = paths[0] if len(paths) == 1 else paths
    return PartitionKey(path=path, kind=kind, version=version)


class CosmosClient:
    """Wrapper for Azure Cosmos DB operations on a single database."""

    # Dashboard containers
    NIST_CONTROLS = "nist-controls"
    ZTA_ACTIVITIES = "zta-activities"
    POAM_ITEMS = "poam-items"
    VULNERABILITIES = "vulnerabilities"
    CONTROL_HISTORY = "control-history"

    # Imported Azure metadata
    AZURE_RESOURCES = "azure-resources"
    SECURITY_ASSESSMENTS = "security-assessments"

    def __init__(
        self,
        endpoint: str | None = None,
        key: str | None = None,
        database_name: str | None = None,
        credential: Any | None = None,
    ):
        """Initialize Cosmos DB client.

        Args:
            endpoint: Cosmos DB endpoint URL. Defaults to AZURE_COSMOS_ENDPOINT,
                then VITE_COSMOS_DB_ENDPOINT.
            key: Account key. Defaults to AZURE_COSMOS_KEY, then VITE_COSMOS_DB_KEY.
                When no key is available the credential is used instead.
            database_name: Database name. Defaults to AZURE_COSMOS_DATABASE_NAME,
                then VITE_COSMOS_DB_NAME, then 'cato-dashboard'.
            credential: Azure credential. Defaults to DefaultAzureCredential.
        """
        self.endpoint = (
            endpoint
            or os.environ.get("AZURE_COSMOS_ENDPOINT")
            or os.environ.get("VITE_COSMOS_DB_ENDPOINT")
        )
        key = key or os.environ.get("AZURE_COSMOS_KEY") or os.environ.get("VITE_COSMOS_DB_KEY")
        self.database_name = (
            database_name
            or os.environ.get("AZURE_COSMOS_DATABASE_NAME")
            or os.environ.get("VITE_COSMOS_DB_NAME")
            or DEFAULT_DATABASE_NAME
        )

        if not self.endpoint:
            raise ConfigurationError(
                "AZURE_COSMOS_ENDPOINT environment variable or endpoint parameter required",
                missing=["AZURE_COSMOS_ENDPOINT"],
            )

        client_kwargs: dict[str, Any] = {}
        if is_emulator_endpoint(self.endpoint):
            logger.warning("Using Cosmos DB Emulator - TLS verification disabled")
            client_kwargs["connection_verify"] = False

        self.credential = key or credential or DefaultAzureCredential()
        self._client = AzureCosmosClient(self.endpoint, credential=self.credential, **client_kwargs)
        self._database = self._client.get_database_client(self.database_name)
        self._partition_keys: dict[str, list[str]] = {}

    def _get_container(self, container_name: str):
        """Get a container client."""
        return self._database.get_container_client(container_name)

    # Database / container management
    def ensure_database(self) -> None:
        """Create the database if it does not exist."""
        self._database = self._client.create_database_if_not_exists(id=self.database_name)

    def ensure_container(
        self,
        container: ContainerDefinition | str,
        partition_key: dict[str, Any] | str | None = None,
    ) -> None:
        """Create a container if it does not exist.

        Args:
            container: Container definition, or a container id when
                partition_key is given separately.
            partition_key: Partition-key path, or a partitionKey properties
                dict copied from another container.
        """
        if isinstance(container, ContainerDefinition):
            container_id = container.id
            partition_key = container.partition_key
        else:
            container_id = container

        if partition_key is None:
            raise ValueError(f"Partition key required to create container {container_id}")

        self._database.create_container_if_not_exists(
            id=container_id,
            partition_key=_to_partition_key(partition_key),
        )
        self._partition_keys[container_id] = _partition_key_paths(partition_key)
        logger.info(f"Container '{container_id}' created/verified")

    def list_containers(self) -> list[dict[str, Any]]:
        """List container properties in the database."""
        return list(self._database.list_containers())

    def get_partition_key_paths(self, container_name: str) -> list[str]:
        """Get the partition-key paths declared by a container."""
        if container_name not in self._partition_keys:
            properties = self._get_container(container_name).read()
            self._partition_keys[container_name] = _partition_key_paths(
                properties.get("partitionKey")
            )
        return self._partition_keys[container_name]

    # Item operations
    def read_all_items(self, container_name: str) -> list[dict[str, Any]]:
        """Read every item in a container."""
        container = self._get_container(container_name)
        return list(container.read_all_items())

    def read_item(self, container_name: str, item_id: str, partition_key: Any) -> dict[str, Any] | None:
        """Read a single item, or None if it does not exist."""
        container = self._get_container(container_name)
        try:
            return container.read_item(item=item_id, partition_key=partition_key)
        except CosmosResourceNotFoundError:
            return None

    def upsert_item(self, container_name: str, item: dict[str, Any]) -> dict[str, Any]:
        """Insert or replace an item keyed by id.

        Raises:
            PartitionKeyError: If the item lacks the container's partition-key field.
        """
        for path in self.get_partition_key_paths(container_name):
            if get_partition_key_value(item, path) is None:
                raise PartitionKeyError(container_name, path, item.get("id"))
        container = self._get_container(container_name)
        return container.upsert_item(item)

    def upsert_items(
        self,
        container_name: str,
        items: Iterable[dict[str, Any]],
        id_field: str = "id",
    ) -> UpsertResult:
        """Upsert items one at a time, logging and skipping failures.

        Args:
            container_name: Target container.
            items: Documents to write.
            id_field: Field used to identify an item in logs and failures.

        Returns:
            UpsertResult with counts and the failed item identifiers.
        """
        result = UpsertResult(container=container_name)
        for item in items:
            result.attempted += 1
            item_id = str(item.get(id_field) or item.get("id") or "unknown")
            try:
                self.upsert_item(container_name, item)
                result.upserted += 1
                logger.debug(f"Upserted {item_id} into {container_name}")
            except Exception as e:
                logger.warning(f"Failed to upsert item {item_id} into {container_name}: {e}")
                result.failed.append(ItemFailure(id=item_id, error=str(e)))
        return result
