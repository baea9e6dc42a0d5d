"""Export layer: per-subscription inventory export and report generation."""

from export_layer.exporter import SubscriptionExporter, export_subscriptions
from export_layer.aggregator import (
    build_export_report,
    generate_env_config,
    select_primary_source,
)
from export_layer.artifacts import (
    DEFAULT_EXPORT_DIR,
    ensure_export_dir,
    subscription_filename,
    write_subscription_data,
    write_summary_report,
    write_env_config,
    write_import_instructions,
)
from export_layer.queries import (
    query_resource_groups,
    query_resources,
    query_cosmosdb_accounts,
    query_security_assessments,
)

__all__ = [
    # Export
    "SubscriptionExporter",
    "export_subscriptions",
    # Aggregation
    "build_export_report",
    "generate_env_config",
    "select_primary_source",
    # Artifacts
    "DEFAULT_EXPORT_DIR",
    "ensure_export_dir",
    "subscription_filename",
    "write_subscription_data",
    "write_summary_report",
    "write_env_config",
    "write_import_instructions",
    # Queries
    "query_resource_groups",
    "query_resources",
    "query_cosmosdb_accounts",
    "query_security_assessments",
]
