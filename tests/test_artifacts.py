"""Tests for export artifact writers."""

import json
from datetime import datetime, timezone

from conftest import make_export_result, make_resource, make_subscription
from export_layer import (
    build_export_report,
    ensure_export_dir,
    subscription_filename,
    write_env_config,
    write_import_instructions,
    write_subscription_data,
    write_summary_report,
)


def test_subscription_filename_replaces_special_characters():
    assert subscription_filename("Prod East (Main)") == "subscription-Prod-East--Main--data.json"


def test_ensure_export_dir_creates_nested(tmp_path):
    path = ensure_export_dir(tmp_path / "a" / "b")
    assert path.is_dir()
    assert ensure_export_dir(path) == path


def test_write_subscription_data(tmp_path):
    result = make_export_result(
        make_subscription("prod east"), resources=[make_resource("vm1", "Microsoft.Compute/virtualMachines")]
    )

    path = write_subscription_data(tmp_path, result)

    data = json.loads(path.read_text())
    assert path.name == "subscription-prod-east-data.json"
    assert data["subscription"]["name"] == "prod east"
    assert data["summary"]["resourcesByType"] == {"Microsoft.Compute/virtualMachines": 1}
    assert data["success"] is True


def test_write_summary_and_env_config(tmp_path):
    report = build_export_report(
        [make_export_result(make_subscription("dev"))],
        datetime(2024, 1, 1, tzinfo=timezone.utc),
    )

    summary_path = write_summary_report(tmp_path, report)
    env_path = write_env_config(tmp_path, "AZURE_SOURCE_SUBSCRIPTION_ID=x\n")

    assert json.loads(summary_path.read_text())["summary"]["totalSubscriptions"] == 1
    assert summary_path.name == "multi-subscription-summary.json"
    assert env_path.read_text() == "AZURE_SOURCE_SUBSCRIPTION_ID=x\n"


def test_write_import_instructions(tmp_path):
    path = write_import_instructions(tmp_path)
    assert path.name == "IMPORT_INSTRUCTIONS.md"
    assert "ato-pipeline import" in path.read_text()
