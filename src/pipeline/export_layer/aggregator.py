"""Merge per-subscription exports into a summary report and import configuration."""

from __future__ import annotations

from datetime import datetime

from shared import (
    CosmosAccount,
    ExportReport,
    ExportResult,
    ExportTotals,
    Subscription,
    SubscriptionReportEntry,
    merge_counts,
)

LARGE_ENVIRONMENT_THRESHOLD = 1000


def select_primary_source(
    results: list[ExportResult],
) -> tuple[Subscription, CosmosAccount | None] | None:
    """Pick the subscription (and account) to surface in the import configuration.

    The first successful subscription, in input order, holding an account with
    a usable primary key wins. Otherwise the first successful subscription is
    returned without an account.

    Returns:
        (subscription, account) or (subscription, None), or None when nothing succeeded.
    """
    for result in results:
        if not result.success:
            continue
        for account in result.cosmosdb_accounts:
            if account.has_usable_keys:
                return result.subscription, account

    first_successful = next((r for r in results if r.success), None)
    if first_successful is None:
        return None
    return first_successful.subscription, None


def build_export_report(results: list[ExportResult], generated_at: datetime) -> ExportReport:
    """Build the consolidated multi-subscription summary report."""
    successful = [r for r in results if r.success]
    failed = [r for r in results if not r.success]

    totals = ExportTotals(
        totalSubscriptions=len(results),
        successfulExports=len(successful),
        failedExports=len(failed),
        totalResources=sum(len(r.resources) for r in successful),
        totalCosmosDBAccounts=sum(len(r.cosmosdb_accounts) for r in successful),
        totalResourceGroups=sum(len(r.resource_groups) for r in successful),
    )

    entries = [
        SubscriptionReportEntry(
            name=r.subscription.name,
            id=r.subscription.id,
            success=r.success,
            error=r.error,
            resourceCount=len(r.resources),
            cosmosDBCount=len(r.cosmosdb_accounts),
            resourceGroupCount=len(r.resource_groups),
        )
        for r in results
    ]

    recommendations = []
    if totals.total_cosmosdb_accounts == 0:
        recommendations.append(
            "Consider creating a CosmosDB account to store your security compliance data"
        )
    if failed:
        recommendations.append("Some subscriptions failed to export - check your permissions")
    if totals.total_resources > LARGE_ENVIRONMENT_THRESHOLD:
        recommendations.append(
            "Large environment detected - consider using resource tagging for better organization"
        )

    return ExportReport(
        exportTimestamp=generated_at,
        summary=totals,
        subscriptions=entries,
        resourceTypesSummary=merge_counts(r.summary.resources_by_type for r in successful),
        recommendations=recommendations,
    )


def generate_env_config(results: list[ExportResult], generated_at: datetime) -> str:
    """Render environment-variable configuration for the importer.

    When no account with usable keys exists, the CosmosDB endpoint and key
    lines are omitted in favour of a subscription-only block.
    """
    successful_count = sum(1 for r in results if r.success)
    total_resources = sum(len(r.resources) for r in results)
    total_accounts = sum(len(r.cosmosdb_accounts) for r in results)

    lines = [
        "# Multi-Subscription Azure Environment Configuration",
        f"# Generated on {generated_at.isoformat()}",
        "# ===================================================",
        "",
        "# SUMMARY",
        f"# Total subscriptions scanned: {successful_count}",
        f"# Total resources found: {total_resources}",
        f"# Total CosmosDB accounts: {total_accounts}",
        "",
        "# AZURE DATA IMPORT CONFIGURATION",
        "# ==========================================",
    ]

    selection = select_primary_source(results)
    if selection is not None:
        subscription, account = selection
        if account is not None:
            lines += [
                "",
                "# Primary subscription for import (has accessible CosmosDB)",
                f"AZURE_SOURCE_SUBSCRIPTION_ID={subscription.id}",
                "",
                "# Primary resource group (CosmosDB account location)",
                f"AZURE_SOURCE_RESOURCE_GROUP={account.resource_group}",
                "",
                "# CosmosDB connection details",
                f"AZURE_SOURCE_COSMOS_ENDPOINT={account.document_endpoint or ''}",
                f"AZURE_SOURCE_COSMOS_KEY={account.connection_info.primary_key}",
                "AZURE_SOURCE_COSMOS_DATABASE=your-database-name-here",
                "",
                "# Tenant information",
                f"AZURE_SOURCE_TENANT_ID={subscription.tenant_id or ''}",
            ]
        else:
            lines += [
                "",
                "# Primary subscription for import",
                f"AZURE_SOURCE_SUBSCRIPTION_ID={subscription.id}",
                "",
                "# Note: No accessible CosmosDB accounts found - you may need to:",
                "# 1. Ensure you have Cosmos DB Account Reader permissions",
                "# 2. Create a CosmosDB account for data import",
                "# 3. Manually set the AZURE_SOURCE_COSMOS_* values",
                "",
                "# Tenant information",
                f"AZURE_SOURCE_TENANT_ID={subscription.tenant_id or ''}",
            ]

    return "\n".join(lines) + "\n"
