"""Tests for the CosmosDB / Resource Graph importer."""

import json
from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest
from azure.cosmos.exceptions import CosmosResourceNotFoundError

from shared import CosmosClient, ImportConfig, ImportStage
from data_layer import (
    import_azure_resources,
    import_cosmos_data,
    import_security_assessments,
    run_import,
    write_import_report,
)
from data_layer.import_azure_data import build_assessment_document, build_resource_document

TARGET_ENV = {
    "AZURE_SOURCE_SUBSCRIPTION_ID": "sub-1",
    "AZURE_COSMOS_ENDPOINT": "https://dst.documents.azure.com:443/",
    "AZURE_COSMOS_KEY": "dst-key",
    "AZURE_COSMOS_DATABASE_NAME": "dst-db",
}

VM_ROW = {
    "id": "/subscriptions/sub-1/resourceGroups/rg-app/providers/Microsoft.Compute/virtualMachines/vm1",
    "name": "vm1",
    "type": "Microsoft.Compute/virtualMachines",
    "location": "eastus",
    "tags": None,
    "properties": {"vmId": "abc"},
}


@pytest.fixture
def source(cosmos_account):
    cosmos_account.add_container(
        "src-db",
        "nist-controls",
        "/controlIdentifier",
        [{"id": "AC-1", "controlIdentifier": "AC-1"}, {"id": "AC-2", "controlIdentifier": "AC-2"}],
    )
    cosmos_account.add_container("src-db", "poam-items", "/status", [{"id": "P-1", "status": "open"}])
    return CosmosClient(endpoint="https://src.documents.azure.com:443/", key="k", database_name="src-db")


@pytest.fixture
def target(cosmos_account):
    return CosmosClient(endpoint="https://dst.documents.azure.com:443/", key="k", database_name="dst-db")


def test_import_cosmos_data_copies_containers(source, target, cosmos_account):
    results = import_cosmos_data(source, target)

    assert [(r.container, r.upserted) for r in results] == [("nist-controls", 2), ("poam-items", 1)]
    copied = cosmos_account.databases["dst-db"].containers["nist-controls"]
    assert copied.paths == ["/controlIdentifier"]
    assert [d["id"] for d in copied.documents()] == ["AC-1", "AC-2"]


def test_import_cosmos_data_skips_failed_item(target, cosmos_account):
    items = [{"id": f"item-{i}", "status": "open"} for i in range(1, 11)]
    cosmos_account.add_container("src-db", "poam-items", "/status", items)
    cosmos_account.add_container("dst-db", "poam-items", "/status").fail_on = {"item-7"}
    source = CosmosClient(endpoint="https://src.documents.azure.com:443/", key="k", database_name="src-db")

    results = import_cosmos_data(source, target)

    assert results[0].upserted == 9
    assert [f.id for f in results[0].failed] == ["item-7"]
    assert len(cosmos_account.databases["dst-db"].containers["poam-items"].items) == 9


def test_import_cosmos_data_strips_system_properties(source, target, cosmos_account):
    import_cosmos_data(source, target)

    written = cosmos_account.databases["dst-db"].containers["nist-controls"].received
    assert written
    for body in written:
        assert not [key for key in body if key.startswith("_")]


def test_build_resource_document():
    doc = build_resource_document(VM_ROW, "sub-1", "2024-01-01T00:00:00+00:00")

    assert doc["id"] == "vm1"
    assert doc["resourceId"] == VM_ROW["id"]
    assert doc["resourceType"] == "virtualMachines"
    assert doc["resourceGroupName"] == "rg-app"
    assert doc["tags"] == {}
    assert doc["subscriptionId"] == "sub-1"


def test_build_assessment_document_severity():
    with_metadata = {"name": "a1", "metadata": {"severity": "High"}, "status": {"code": "Unhealthy"}}
    with_status = {"name": "a2", "status": {"code": "Healthy", "severity": "Low"}}
    without = {"name": "a3"}

    assert build_assessment_document(with_metadata, "now")["severity"] == "high"
    assert build_assessment_document(with_metadata, "now")["status"] == "Unhealthy"
    assert build_assessment_document(with_status, "now")["severity"] == "low"
    assert build_assessment_document(without, "now")["severity"] == "medium"


def test_import_azure_resources(target, cosmos_account):
    graph = MagicMock()
    graph.query_single.return_value = [VM_ROW, dict(VM_ROW, name="vm2", id=VM_ROW["id"] + "2")]

    result = import_azure_resources(graph, target, "sub-1", resource_group="rg-app")

    assert result.upserted == 2
    query, subscription_id = graph.query_single.call_args.args
    assert "resourceGroup =~ 'rg-app'" in query
    assert subscription_id == "sub-1"
    container = cosmos_account.databases["dst-db"].containers["azure-resources"]
    assert container.paths == ["/resourceType"]


def test_import_security_assessments(target, cosmos_account):
    graph = MagicMock()
    graph.query_single.return_value = [{"name": "a1", "id": "/a1", "metadata": {"severity": "High"}}]

    result = import_security_assessments(graph, target, "sub-1")

    assert result.upserted == 1
    container = cosmos_account.databases["dst-db"].containers["security-assessments"]
    assert container.documents()[0]["severity"] == "high"


def test_run_import_skips_cosmos_without_source(target):
    config = ImportConfig.from_env(TARGET_ENV)

    summary = run_import(config, stages=(ImportStage.COSMOS,), target=target)

    assert summary.cosmos_containers == []
    assert summary.errors == []


def test_run_import_collects_stage_errors(target):
    config = ImportConfig.from_env(TARGET_ENV)
    graph = MagicMock()
    graph.query_single.side_effect = RuntimeError("graph unavailable")

    summary = run_import(
        config,
        stages=(ImportStage.RESOURCES, ImportStage.SECURITY),
        target=target,
        graph_client=graph,
    )

    assert summary.azure_resources is None
    assert len(summary.errors) == 2
    assert "graph unavailable" in summary.errors[0]


def test_run_import_continues_after_source_listing_failure(target, cosmos_account):
    config = ImportConfig.from_env(TARGET_ENV)
    source = MagicMock(database_name="your-database-name-here")
    source.list_containers.side_effect = CosmosResourceNotFoundError(
        status_code=404, message="Database not found"
    )
    graph = MagicMock()
    graph.query_single.return_value = [VM_ROW]

    summary = run_import(
        config,
        stages=(ImportStage.COSMOS, ImportStage.RESOURCES),
        target=target,
        source=source,
        graph_client=graph,
    )

    assert summary.cosmos_containers == []
    assert summary.azure_resources.upserted == 1
    assert len(summary.errors) == 1
    assert summary.errors[0].startswith("CosmosDB import failed:")
    assert "azure-resources" in cosmos_account.databases["dst-db"].containers


def test_run_import_validates_config(target):
    with pytest.raises(ValueError):
        run_import(ImportConfig.from_env({}), target=target)


def test_write_import_report_masks_keys(tmp_path, target):
    config = ImportConfig.from_env(TARGET_ENV)
    summary = run_import(config, stages=(ImportStage.COSMOS,), target=target)

    path = write_import_report(
        tmp_path / "import-report.json", config, summary, datetime(2024, 1, 1, tzinfo=timezone.utc)
    )

    text = path.read_text()
    report = json.loads(text)
    assert "dst-key" not in text
    assert report["config"]["targetCosmosKey"] == "***"
    assert report["sourceSubscription"] == "sub-1"
    assert report["targetDatabase"] == "dst-db"
