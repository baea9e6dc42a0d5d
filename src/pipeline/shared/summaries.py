"""Counting utilities for exported inventories.

All functions here are pure folds over lists and dictionaries; nothing is
fetched.
"""

from typing import Any, Iterable


def summarize_by_resource_type(resources: list[dict[str, Any]]) -> dict[str, int]:
    """Count resources by Azure resource type.

    Args:
        resources: Resource dictionaries with a 'type' field.

    Returns:
        Dictionary mapping resource type to count. Values sum to len(resources).
    """
    counts: dict[str, int] = {}
    for resource in resources:
        resource_type = resource.get("type") or "unknown"
        counts[resource_type] = counts.get(resource_type, 0) + 1
    return counts


def merge_counts(histograms: Iterable[dict[str, int]]) -> dict[str, int]:
    """Merge several count dictionaries by summing matching keys."""
    merged: dict[str, int] = {}
    for histogram in histograms:
        for key, count in histogram.items():
            merged[key] = merged.get(key, 0) + count
    return merged


def top_counts(counts: dict[str, int], limit: int = 10) -> list[tuple[str, int]]:
    """Return the largest entries of a count dictionary, highest first."""
    return sorted(counts.items(), key=lambda entry: entry[1], reverse=True)[:limit]


def parse_resource_type_segment(resource_type: str | None) -> str:
    """Return the second path segment of an Azure type string.

    'Microsoft.Compute/virtualMachines' -> 'virtualMachines'.
    """
    if not resource_type:
        return "unknown"
    parts = resource_type.split("/")
    return parts[1] if len(parts) > 1 and parts[1] else "unknown"


def parse_resource_group(resource_id: str | None) -> str | None:
    """Extract the resource group name from an Azure resource ID."""
    if not resource_id:
        return None
    parts = resource_id.split("/")
    lowered = [p.lower() for p in parts]
    try:
        return parts[lowered.index("resourcegroups") + 1]
    except (ValueError, IndexError):
        return None
