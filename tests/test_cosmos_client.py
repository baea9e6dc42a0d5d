"""Tests for the CosmosDB wrapper."""

import pytest

from shared import ConfigurationError, ContainerDefinition, CosmosClient, PartitionKeyError
from shared.cosmos_client import (
    get_partition_key_value,
    is_emulator_endpoint,
    strip_system_properties,
)

CONTROLS = ContainerDefinition(id="nist-controls", partitionKey="/controlIdentifier")


class TestHelpers:
    def test_emulator_endpoints(self):
        assert is_emulator_endpoint("https://localhost:8081/")
        assert is_emulator_endpoint("https://127.0.0.1:8081/")
        assert not is_emulator_endpoint("https://prod.documents.azure.com:443/")
        assert not is_emulator_endpoint("https://localhost-prod.documents.azure.com:443/")
        assert not is_emulator_endpoint("https://acct.documents.azure.com:443/?next=localhost")

    def test_lookalike_account_keeps_tls_verification(self, cosmos_account):
        CosmosClient(
            endpoint="https://localhost-prod.documents.azure.com:443/", key="k", database_name="db"
        )
        assert "connection_verify" not in cosmos_account.connections[-1]

    def test_strip_system_properties(self):
        item = {"id": "a", "_rid": "x", "_self": "y", "_etag": "z", "_attachments": "w", "_ts": 1}
        assert strip_system_properties(item) == {"id": "a"}

    def test_partition_key_value_nested(self):
        item = {"id": "a", "meta": {"tenant": "t1"}}
        assert get_partition_key_value(item, "/meta/tenant") == "t1"
        assert get_partition_key_value(item, "/meta/missing") is None
        assert get_partition_key_value(item, "/id") == "a"


class TestConstruction:
    def test_missing_endpoint_raises(self, cosmos_account, clean_env):
        with pytest.raises(ConfigurationError) as exc_info:
            CosmosClient(key="k")
        assert exc_info.value.missing == ["AZURE_COSMOS_ENDPOINT"]
        assert isinstance(exc_info.value, ValueError)

    def test_env_fallbacks(self, cosmos_account, clean_env, monkeypatch):
        monkeypatch.setenv("VITE_COSMOS_DB_ENDPOINT", "https://vite.documents.azure.com:443/")
        monkeypatch.setenv("VITE_COSMOS_DB_KEY", "vite-key")
        monkeypatch.setenv("VITE_COSMOS_DB_NAME", "vite-db")

        client = CosmosClient()

        assert client.endpoint == "https://vite.documents.azure.com:443/"
        assert client.database_name == "vite-db"
        assert cosmos_account.connections[-1]["credential"] == "vite-key"

    def test_primary_env_names_win(self, cosmos_account, clean_env, monkeypatch):
        monkeypatch.setenv("AZURE_COSMOS_ENDPOINT", "https://primary.documents.azure.com:443/")
        monkeypatch.setenv("VITE_COSMOS_DB_ENDPOINT", "https://vite.documents.azure.com:443/")
        monkeypatch.setenv("AZURE_COSMOS_KEY", "primary-key")

        client = CosmosClient()

        assert client.endpoint == "https://primary.documents.azure.com:443/"
        assert client.database_name == "cato-dashboard"

    def test_emulator_disables_tls_verification(self, cosmos_account):
        CosmosClient(endpoint="https://localhost:8081/", key="emulator-key", database_name="db")
        assert cosmos_account.connections[-1]["connection_verify"] is False

    def test_cloud_endpoint_keeps_tls_verification(self, cosmos_account):
        CosmosClient(endpoint="https://acct.documents.azure.com:443/", key="k", database_name="db")
        assert "connection_verify" not in cosmos_account.connections[-1]


class TestContainers:
    def test_ensure_container_is_idempotent(self, cosmos, cosmos_account):
        cosmos.ensure_database()
        cosmos.ensure_container(CONTROLS)
        cosmos.ensure_container(CONTROLS)

        database = cosmos_account.databases["test-db"]
        assert list(database.containers) == ["nist-controls"]
        assert database.containers["nist-controls"].paths == ["/controlIdentifier"]

    def test_ensure_container_with_copied_definition(self, cosmos, cosmos_account):
        cosmos.ensure_container("copied", {"paths": ["/tenantId"], "kind": "Hash", "version": 2})
        assert cosmos.get_partition_key_paths("copied") == ["/tenantId"]

    def test_ensure_container_requires_partition_key(self, cosmos):
        with pytest.raises(ValueError):
            cosmos.ensure_container("no-key")

    def test_partition_key_read_from_container(self, cosmos, cosmos_account):
        cosmos_account.add_container("test-db", "existing", "/status")
        assert cosmos.get_partition_key_paths("existing") == ["/status"]

    def test_read_item_missing_returns_none(self, cosmos):
        cosmos.ensure_container(CONTROLS)
        assert cosmos.read_item("nist-controls", "AC-1", "AC-1") is None


class TestUpserts:
    def test_upsert_requires_partition_key(self, cosmos, cosmos_account):
        cosmos.ensure_container(CONTROLS)

        with pytest.raises(PartitionKeyError) as exc_info:
            cosmos.upsert_item("nist-controls", {"id": "AC-1"})

        assert exc_info.value.partition_key == "/controlIdentifier"
        assert exc_info.value.item_id == "AC-1"
        assert cosmos_account.databases["test-db"].containers["nist-controls"].upsert_calls == 0

    def test_upsert_replaces_by_id(self, cosmos):
        cosmos.ensure_container(CONTROLS)
        cosmos.upsert_item("nist-controls", {"id": "AC-1", "controlIdentifier": "AC-1", "v": 1})
        cosmos.upsert_item("nist-controls", {"id": "AC-1", "controlIdentifier": "AC-1", "v": 2})

        items = cosmos.read_all_items("nist-controls")
        assert len(items) == 1
        assert items[0]["v"] == 2

    def test_failed_item_is_skipped(self, cosmos, cosmos_account):
        cosmos.ensure_container(CONTROLS)
        container = cosmos_account.databases["test-db"].containers["nist-controls"]
        container.fail_on = {"C-7"}
        items = [{"id": f"C-{i}", "controlIdentifier": f"C-{i}"} for i in range(1, 11)]

        result = cosmos.upsert_items("nist-controls", items)

        assert result.attempted == 10
        assert result.upserted == 9
        assert [f.id for f in result.failed] == ["C-7"]
        assert len(container.items) == 9

    def test_missing_partition_key_recorded_as_failure(self, cosmos):
        cosmos.ensure_container(CONTROLS)
        items = [{"id": "AC-1", "controlIdentifier": "AC-1"}, {"id": "AC-2"}]

        result = cosmos.upsert_items("nist-controls", items)

        assert result.upserted == 1
        assert result.failed[0].id == "AC-2"
        assert "/controlIdentifier" in result.failed[0].error

    def test_failure_identified_by_id_field(self, cosmos, cosmos_account):
        cosmos.ensure_container(ContainerDefinition(id="azure-resources", partitionKey="/resourceType"))
        cosmos_account.databases["test-db"].containers["azure-resources"].fail_on = {"vm1"}
        items = [{"id": "vm1", "resourceId": "/subscriptions/s/vm1", "resourceType": "virtualMachines"}]

        result = cosmos.upsert_items("azure-resources", items, id_field="resourceId")

        assert result.failed[0].id == "/subscriptions/s/vm1"
