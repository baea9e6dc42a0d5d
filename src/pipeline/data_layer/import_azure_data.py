"""Import Azure data into the dashboard's CosmosDB database.

Copies every container of a source CosmosDB database into the target
database, and loads Azure resource metadata and security assessments into
the fixed `azure-resources` and `security-assessments` containers.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from shared import (
    ALL_STAGES,
    ContainerDefinition,
    CosmosClient,
    ImportConfig,
    ImportStage,
    ImportSummary,
    ResourceGraphClient,
    UpsertResult,
    parse_resource_group,
    parse_resource_type_segment,
)
from shared.cosmos_client import strip_system_properties
from export_layer.queries import query_resources, query_security_assessments

logger = logging.getLogger(__name__)

AZURE_RESOURCES_CONTAINER = ContainerDefinition(
    id=CosmosClient.AZURE_RESOURCES, partitionKey="/resourceType"
)
SECURITY_ASSESSMENTS_CONTAINER = ContainerDefinition(
    id=CosmosClient.SECURITY_ASSESSMENTS, partitionKey="/severity"
)

DEFAULT_SEVERITY = "medium"


def import_cosmos_data(source: CosmosClient, target: CosmosClient) -> list[UpsertResult]:
    """Copy every container of the source database into the target database.

    Target containers are created with the source container's partition-key
    definition when missing. Item failures are logged and skipped; a failure
    on one container does not stop the next.

    Args:
        source: Client bound to the source database.
        target: Client bound to the target database.

    Returns:
        One UpsertResult per container that could be read.
    """
    logger.info(f"Importing CosmosDB data from {source.database_name} to {target.database_name}")
    target.ensure_database()

    results: list[UpsertResult] = []
    for container in source.list_containers():
        container_id = container["id"]
        logger.info(f"Importing container: {container_id}")
        try:
            target.ensure_container(container_id, container.get("partitionKey"))
            items = [strip_system_properties(item) for item in source.read_all_items(container_id)]
            result = target.upsert_items(container_id, items)
        except Exception as e:
            logger.error(f"Failed to import container {container_id}: {e}")
            continue

        logger.info(f"Imported {result.upserted} of {result.attempted} items from {container_id}")
        results.append(result)

    return results


def build_resource_document(
    resource: dict[str, Any], subscription_id: str, import_date: str
) -> dict[str, Any]:
    """Transform a Resource Graph row into an azure-resources document."""
    resource_id = resource.get("id")
    return {
        "id": resource.get("name"),
        "resourceId": resource_id,
        "name": resource.get("name"),
        "type": resource.get("type"),
        "resourceType": parse_resource_type_segment(resource.get("type")),
        "location": resource.get("location"),
        "resourceGroupName": resource.get("resourceGroup") or parse_resource_group(resource_id),
        "subscriptionId": subscription_id,
        "tags": resource.get("tags") or {},
        "importDate": import_date,
        "properties": resource.get("properties") or {},
    }


def build_assessment_document(assessment: dict[str, Any], import_date: str) -> dict[str, Any]:
    """Transform a security assessment row into a security-assessments document."""
    status = assessment.get("status") or {}
    metadata = assessment.get("metadata") or {}
    severity = metadata.get("severity") or status.get("severity") or DEFAULT_SEVERITY
    return {
        "id": assessment.get("name"),
        "assessmentId": assessment.get("id"),
        "name": assessment.get("name"),
        "displayName": assessment.get("displayName") or metadata.get("displayName"),
        "status": status.get("code"),
        "severity": severity.lower(),
        "description": metadata.get("description"),
        "remediationDescription": metadata.get("remediationDescription"),
        "categories": metadata.get("categories") or [],
        "userImpact": metadata.get("userImpact"),
        "implementationEffort": metadata.get("implementationEffort"),
        "threats": metadata.get("threats") or [],
        "importDate": import_date,
    }


def import_azure_resources(
    graph_client: ResourceGraphClient,
    target: CosmosClient,
    subscription_id: str,
    resource_group: str | None = None,
) -> UpsertResult:
    """Import resource metadata into the azure-resources container.

    Args:
        graph_client: Resource Graph client.
        target: Client bound to the target database.
        subscription_id: Subscription to read resources from.
        resource_group: Optional resource group to limit the scope.

    Returns:
        UpsertResult for the azure-resources container.
    """
    scope = f"resource group {resource_group}" if resource_group else f"subscription {subscription_id}"
    logger.info(f"Importing Azure resources from {scope}")

    target.ensure_container(AZURE_RESOURCES_CONTAINER)
    rows = graph_client.query_single(query_resources(resource_group), subscription_id)

    import_date = datetime.now(timezone.utc).isoformat()
    documents = [build_resource_document(row, subscription_id, import_date) for row in rows]
    result = target.upsert_items(AZURE_RESOURCES_CONTAINER.id, documents, id_field="resourceId")

    logger.info(f"Imported {result.upserted} Azure resources")
    return result


def import_security_assessments(
    graph_client: ResourceGraphClient,
    target: CosmosClient,
    subscription_id: str,
) -> UpsertResult:
    """Import security assessments into the security-assessments container."""
    logger.info(f"Importing security assessments from subscription {subscription_id}")

    target.ensure_container(SECURITY_ASSESSMENTS_CONTAINER)
    rows = graph_client.query_single(query_security_assessments(), subscription_id)

    import_date = datetime.now(timezone.utc).isoformat()
    documents = [build_assessment_document(row, import_date) for row in rows]
    result = target.upsert_items(SECURITY_ASSESSMENTS_CONTAINER.id, documents)

    logger.info(f"Imported {result.upserted} security assessments")
    return result


def run_import(
    config: ImportConfig,
    stages: tuple[ImportStage, ...] = ALL_STAGES,
    credential: Any | None = None,
    target: CosmosClient | None = None,
    source: CosmosClient | None = None,
    graph_client: ResourceGraphClient | None = None,
) -> ImportSummary:
    """Run the selected import stages in sequence.

    Raises:
        ConfigurationError: If variables required by the stages are missing.
    """
    config.validate_for(stages)

    target = target or CosmosClient(
        endpoint=config.target_cosmos_endpoint,
        key=config.target_cosmos_key,
        database_name=config.target_cosmos_database,
    )
    summary = ImportSummary()

    if ImportStage.COSMOS in stages:
        if source is None and config.has_source_cosmos:
            source = CosmosClient(
                endpoint=config.source_cosmos_endpoint,
                key=config.source_cosmos_key,
                database_name=config.source_cosmos_database,
            )
        if source is not None:
            try:
                summary.cosmos_containers = import_cosmos_data(source, target)
            except Exception as e:
                logger.error(f"CosmosDB import failed: {e}")
                summary.errors.append(f"CosmosDB import failed: {e}")
        else:
            logger.warning("Skipping CosmosDB import - source database not configured")

    needs_graph = ImportStage.RESOURCES in stages or ImportStage.SECURITY in stages
    if needs_graph:
        target.ensure_database()
        graph_client = graph_client or ResourceGraphClient(credential)

    if ImportStage.RESOURCES in stages:
        try:
            summary.azure_resources = import_azure_resources(
                graph_client,
                target,
                config.source_subscription_id,
                config.source_resource_group,
            )
        except Exception as e:
            logger.error(f"Azure resources import failed: {e}")
            summary.errors.append(f"Azure resources import failed: {e}")

    if ImportStage.SECURITY in stages:
        try:
            summary.security_assessments = import_security_assessments(
                graph_client, target, config.source_subscription_id
            )
        except Exception as e:
            logger.error(f"Security data import failed: {e}")
            summary.errors.append(f"Security data import failed: {e}")

    return summary


def write_import_report(
    path: str | Path,
    config: ImportConfig,
    summary: ImportSummary,
    generated_at: datetime | None = None,
) -> Path:
    """Write the import report with secrets masked."""
    path = Path(path)
    report = {
        "importDate": (generated_at or datetime.now(timezone.utc)).isoformat(),
        "sourceSubscription": config.source_subscription_id,
        "targetDatabase": config.target_cosmos_database,
        "summary": summary.model_dump(by_alias=True, mode="json"),
        "config": config.masked(),
    }
    with open(path, "w", encoding="utf-8") as f:
        json.dump(report, f, indent=2)
    logger.info(f"Import report saved: {path}")
    return path
