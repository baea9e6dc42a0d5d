"""Bundled seed records for the dashboard containers."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

SEED_DIR = Path(__file__).parent

NIST_CONTROLS_FILE = "nist_controls.json"
ZTA_ACTIVITIES_FILE = "zta_activities.json"
POAM_ITEMS_FILE = "poam_items.json"
VULNERABILITIES_FILE = "vulnerabilities.json"
TENANTS_FILE = "tenants.json"
CLOUD_ENVIRONMENTS_FILE = "cloud_environments.json"
EXECUTION_ENABLERS_FILE = "execution_enablers.json"
SSC_METRICS_FILE = "ssc_metrics.json"
COMPLIANCE_FINDINGS_FILE = "compliance_findings.json"

SEED_FILES = (
    NIST_CONTROLS_FILE,
    ZTA_ACTIVITIES_FILE,
    POAM_ITEMS_FILE,
    VULNERABILITIES_FILE,
    TENANTS_FILE,
    CLOUD_ENVIRONMENTS_FILE,
    EXECUTION_ENABLERS_FILE,
    SSC_METRICS_FILE,
    COMPLIANCE_FINDINGS_FILE,
)


def load_seed(filename: str) -> list[dict[str, Any]]:
    """Load a bundled seed file as a list of records."""
    with open(SEED_DIR / filename, encoding="utf-8") as f:
        data = json.load(f)
    # Handle both single object and array
    return [data] if isinstance(data, dict) else data


def missing_seed_files(seed_dir: Path = SEED_DIR) -> list[str]:
    """Return the bundled seed files that are not present on disk."""
    return [name for name in SEED_FILES if not (seed_dir / name).exists()]
