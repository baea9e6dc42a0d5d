"""Shared library for the ATO data pipeline."""

from shared.exceptions import (
    PipelineError,
    AuthenticationRequiredError,
    ConfigurationError,
    SubscriptionNotFoundError,
    PartitionKeyError,
)
from shared.models import (
    Subscription,
    SubscriptionState,
    CosmosAccount,
    CosmosConnectionInfo,
    ExportResult,
    ExportSummary,
    ExportReport,
    ExportTotals,
    SubscriptionReportEntry,
    ContainerDefinition,
    ItemFailure,
    UpsertResult,
    ImportSummary,
    MigrationSummary,
    ComplianceStatus,
    ActivityStatus,
    RiskLevel,
    NistControl,
    ZtaActivity,
    PoamItem,
    Vulnerability,
    Tenant,
    CloudEnvironment,
    ExecutionEnabler,
    SscMetrics,
    ComplianceFinding,
    ComplianceData,
)
from shared.config import ImportConfig, ImportStage, ALL_STAGES
from shared.cosmos_client import CosmosClient
from shared.resource_graph import ResourceGraphClient
from shared.subscriptions import (
    get_credential,
    list_enabled_subscriptions,
    select_subscriptions,
    find_subscription,
)
from shared.summaries import (
    summarize_by_resource_type,
    merge_counts,
    top_counts,
    parse_resource_type_segment,
    parse_resource_group,
)

__all__ = [
    # Exceptions
    "PipelineError",
    "AuthenticationRequiredError",
    "ConfigurationError",
    "SubscriptionNotFoundError",
    "PartitionKeyError",
    # Models
    "Subscription",
    "SubscriptionState",
    "CosmosAccount",
    "CosmosConnectionInfo",
    "ExportResult",
    "ExportSummary",
    "ExportReport",
    "ExportTotals",
    "SubscriptionReportEntry",
    "ContainerDefinition",
    "ItemFailure",
    "UpsertResult",
    "ImportSummary",
    "MigrationSummary",
    "ComplianceStatus",
    "ActivityStatus",
    "RiskLevel",
    "NistControl",
    "ZtaActivity",
    "PoamItem",
    "Vulnerability",
    "Tenant",
    "CloudEnvironment",
    "ExecutionEnabler",
    "SscMetrics",
    "ComplianceFinding",
    "ComplianceData",
    # Configuration
    "ImportConfig",
    "ImportStage",
    "ALL_STAGES",
    # Clients
    "CosmosClient",
    "ResourceGraphClient",
    # Subscriptions
    "get_credential",
    "list_enabled_subscriptions",
    "select_subscriptions",
    "find_subscription",
    # Summaries
    "summarize_by_resource_type",
    "merge_counts",
    "top_counts",
    "parse_resource_type_segment",
    "parse_resource_group",
]
