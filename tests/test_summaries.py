"""Tests for inventory counting helpers."""

from shared import (
    merge_counts,
    parse_resource_group,
    parse_resource_type_segment,
    summarize_by_resource_type,
    top_counts,
)


def test_histogram_sums_to_resource_count():
    resources = [
        {"type": "Microsoft.Compute/virtualMachines"},
        {"type": "Microsoft.Compute/virtualMachines"},
        {"type": "Microsoft.Storage/storageAccounts"},
        {"type": None},
        {},
    ]

    counts = summarize_by_resource_type(resources)

    assert sum(counts.values()) == len(resources)
    assert counts["Microsoft.Compute/virtualMachines"] == 2
    assert counts["unknown"] == 2


def test_histogram_empty():
    assert summarize_by_resource_type([]) == {}


def test_merge_counts():
    merged = merge_counts([{"a": 1, "b": 2}, {"b": 3, "c": 4}, {}])
    assert merged == {"a": 1, "b": 5, "c": 4}


def test_top_counts_orders_highest_first():
    assert top_counts({"a": 1, "b": 5, "c": 3}, limit=2) == [("b", 5), ("c", 3)]


def test_parse_resource_type_segment():
    assert parse_resource_type_segment("Microsoft.Compute/virtualMachines") == "virtualMachines"
    assert parse_resource_type_segment("Microsoft.Compute") == "unknown"
    assert parse_resource_type_segment(None) == "unknown"


def test_parse_resource_group_is_case_insensitive():
    resource_id = "/subscriptions/s1/ResourceGroups/rg-Prod/providers/Microsoft.Web/sites/app"
    assert parse_resource_group(resource_id) == "rg-Prod"
    assert parse_resource_group("/subscriptions/s1") is None
    assert parse_resource_group(None) is None
