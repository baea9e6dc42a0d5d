"""Azure Resource Graph KQL queries for subscription inventory export.

Every query is scoped to subscriptions by the Resource Graph request, not by
the query text.
"""

from __future__ import annotations


def query_resource_groups() -> str:
    """KQL query for resource groups."""
    return """
ResourceContainers
| where type =~ 'microsoft.resources/subscriptions/resourcegroups'
| project
    id,
    name,
    location,
    subscriptionId,
    managedBy,
    tags,
    properties
"""


def query_resources(resource_group: str | None = None) -> str:
    """KQL query for all resources, optionally limited to one resource group."""
    scope = f"\n| where resourceGroup =~ '{_escape(resource_group)}'" if resource_group else ""
    return f"""
Resources{scope}
| project
    id,
    name,
    type,
    kind,
    location,
    resourceGroup,
    subscriptionId,
    sku,
    tags,
    properties
"""


def query_cosmosdb_accounts() -> str:
    """KQL query for CosmosDB database accounts."""
    return """
Resources
| where type =~ 'microsoft.documentdb/databaseaccounts'
| project
    id,
    name,
    resourceGroup,
    location,
    kind,
    subscriptionId,
    documentEndpoint = tostring(properties.documentEndpoint),
    tags
"""


def query_security_assessments() -> str:
    """KQL query for Defender for Cloud security assessments."""
    return """
SecurityResources
| where type =~ 'microsoft.security/assessments'
| project
    id,
    name,
    displayName = tostring(properties.displayName),
    status = properties.status,
    metadata = properties.metadata,
    resourceDetails = properties.resourceDetails
"""


def _escape(value: str) -> str:
    return value.replace("'", "\\'")
