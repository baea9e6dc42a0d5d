"""Seed the multi-cloud (tenant-scoped) dashboard containers.

Every shared NIST control and ZTA activity is copied into the tenant's
enhanced containers under a `<tenantId>-<identifier>` key, with a synthetic
per-environment status overlay. The overlay is demo data: it is drawn from an
injectable random generator so runs can be reproduced with a fixed seed.
"""

from __future__ import annotations

import logging
import random
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Callable

from pydantic import BaseModel

from shared import (
    ActivityStatus,
    CloudEnvironment,
    ComplianceData,
    ComplianceStatus,
    ContainerDefinition,
    CosmosClient,
    ExecutionEnabler,
    MigrationSummary,
    RiskLevel,
    SscMetrics,
    Tenant,
)
from seed_data import (
    CLOUD_ENVIRONMENTS_FILE,
    COMPLIANCE_FINDINGS_FILE,
    EXECUTION_ENABLERS_FILE,
    NIST_CONTROLS_FILE,
    SSC_METRICS_FILE,
    TENANTS_FILE,
    ZTA_ACTIVITIES_FILE,
    load_seed,
)
from data_layer.seed_migrator import SeedMigrator, SeedSet

logger = logging.getLogger(__name__)

DEMO_TENANT_ID = "demo-tenant-001"
DEMO_ASSESSOR = "admin-user-001"
PRIMARY_ENVIRONMENT_ID = "env-azure-prod-001"
SECONDARY_ENVIRONMENT_ID = "env-aws-dev-001"

# Overlay timestamps are spread over this window before "now"
ASSESSMENT_WINDOW = timedelta(days=30)

TENANTS_CONTAINER = ContainerDefinition(id="tenants", partitionKey="/id")
CLOUD_ENVIRONMENTS_CONTAINER = ContainerDefinition(id="cloud-environments", partitionKey="/tenantId")
NIST_CONTROLS_ENHANCED_CONTAINER = ContainerDefinition(
    id="nist-controls-enhanced", partitionKey="/tenantId"
)
ZTA_ACTIVITIES_ENHANCED_CONTAINER = ContainerDefinition(
    id="zta-activities-enhanced", partitionKey="/tenantId"
)
POAM_ITEMS_ENHANCED_CONTAINER = ContainerDefinition(
    id="poam-items-enhanced", partitionKey="/tenantId"
)
COMPLIANCE_DATA_CONTAINER = ContainerDefinition(id="compliance-data", partitionKey="/tenantId")
SSC_METRICS_CONTAINER = ContainerDefinition(id="ssc-metrics", partitionKey="/tenantId")
EXECUTION_ENABLERS_CONTAINER = ContainerDefinition(id="execution-enablers", partitionKey="/tenantId")
AUDIT_LOGS_CONTAINER = ContainerDefinition(id="audit-logs", partitionKey="/tenantId")

MULTICLOUD_CONTAINERS = (
    TENANTS_CONTAINER,
    CLOUD_ENVIRONMENTS_CONTAINER,
    NIST_CONTROLS_ENHANCED_CONTAINER,
    ZTA_ACTIVITIES_ENHANCED_CONTAINER,
    POAM_ITEMS_ENHANCED_CONTAINER,
    COMPLIANCE_DATA_CONTAINER,
    SSC_METRICS_CONTAINER,
    EXECUTION_ENABLERS_CONTAINER,
    AUDIT_LOGS_CONTAINER,
)

# Hours before "now" at which each SSC scan ran
SSC_SCAN_AGE_HOURS = {"sastResults": 24, "scaResults": 24, "containerSecurity": 12}

# Days before "now" at which each compliance finding was discovered
FINDING_AGE_DAYS = {"finding-001": 2, "finding-002": 1}

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _iso(value: datetime) -> str:
    return value.isoformat()


def _dump(model: type[BaseModel], record: dict[str, Any]) -> dict[str, Any]:
    return model.model_validate(record).model_dump(by_alias=True, exclude_none=True)


def _random_past(rng: random.Random, now: datetime) -> str:
    return _iso(now - rng.random() * ASSESSMENT_WINDOW)


def _pick(rng: random.Random, threshold: float, above: Enum, otherwise: Enum) -> str:
    return above.value if rng.random() > threshold else otherwise.value


def tenant_scoped_id(tenant_id: str, identifier: str) -> str:
    return f"{tenant_id}-{identifier}"


def build_tenant_records(now: datetime) -> list[dict[str, Any]]:
    """Demo tenant with its role assignments stamped at `now`."""
    stamp = _iso(now)
    records = []
    for raw in load_seed(TENANTS_FILE):
        record = dict(raw, createdAt=stamp, updatedAt=stamp)
        record["roles"] = [dict(role, assignedAt=stamp) for role in raw.get("roles", [])]
        records.append(_dump(Tenant, record))
    return records


def build_cloud_environment_records(now: datetime) -> list[dict[str, Any]]:
    stamp = _iso(now)
    return [
        _dump(CloudEnvironment, dict(raw, lastSync=stamp, createdAt=stamp, updatedAt=stamp))
        for raw in load_seed(CLOUD_ENVIRONMENTS_FILE)
    ]


def build_execution_enabler_records(now: datetime) -> list[dict[str, Any]]:
    stamp = _iso(now)
    return [
        _dump(ExecutionEnabler, dict(raw, lastUpdated=stamp))
        for raw in load_seed(EXECUTION_ENABLERS_FILE)
    ]


def build_ssc_metric_records(now: datetime) -> list[dict[str, Any]]:
    records = []
    for raw in load_seed(SSC_METRICS_FILE):
        record = dict(raw, collectedAt=_iso(now))
        for section, hours in SSC_SCAN_AGE_HOURS.items():
            if section in record:
                record[section] = dict(
                    record[section], lastScanDate=_iso(now - timedelta(hours=hours))
                )
        records.append(_dump(SscMetrics, record))
    return records


def build_compliance_snapshot(
    now: datetime,
    tenant_id: str = DEMO_TENANT_ID,
    environment_id: str = PRIMARY_ENVIRONMENT_ID,
) -> dict[str, Any]:
    """Sample compliance-data document collected at `now`."""
    findings = []
    for raw in load_seed(COMPLIANCE_FINDINGS_FILE):
        age = timedelta(days=FINDING_AGE_DAYS.get(raw["id"], 0))
        findings.append(dict(raw, discoveredAt=_iso(now - age), lastChecked=_iso(now)))

    snapshot = {
        "id": f"azure-compliance-{int(now.timestamp() * 1000)}",
        "tenantId": tenant_id,
        "environmentId": environment_id,
        "provider": "azure",
        "collectedAt": _iso(now),
        "rawData": {"securityFindings": [], "configCompliance": []},
        "findings": findings,
    }
    return _dump(ComplianceData, snapshot)


def overlay_control(
    control: dict[str, Any],
    tenant_id: str,
    rng: random.Random,
    now: datetime,
) -> dict[str, Any]:
    """Re-key a shared NIST control for a tenant and attach environment status."""
    return {
        **control,
        "id": tenant_scoped_id(tenant_id, control["controlIdentifier"]),
        "tenantId": tenant_id,
        "environmentStatus": {
            PRIMARY_ENVIRONMENT_ID: {
                "status": _pick(rng, 0.3, ComplianceStatus.COMPLIANT, ComplianceStatus.PARTIAL),
                "lastAssessed": _random_past(rng, now),
                "assessedBy": DEMO_ASSESSOR,
                "evidence": ["assessment-report.pdf"],
                "riskLevel": _pick(rng, 0.7, RiskLevel.HIGH, RiskLevel.MEDIUM),
            },
            SECONDARY_ENVIRONMENT_ID: {
                "status": _pick(rng, 0.4, ComplianceStatus.COMPLIANT, ComplianceStatus.NOT_ASSESSED),
                "lastAssessed": _random_past(rng, now),
                "assessedBy": DEMO_ASSESSOR,
                "evidence": [],
                "riskLevel": RiskLevel.LOW.value,
            },
        },
        "overallStatus": _pick(rng, 0.2, ComplianceStatus.COMPLIANT, ComplianceStatus.PARTIAL),
        "overallRiskLevel": _pick(rng, 0.8, RiskLevel.HIGH, RiskLevel.MEDIUM),
    }


def overlay_activity(
    activity: dict[str, Any],
    tenant_id: str,
    rng: random.Random,
    now: datetime,
) -> dict[str, Any]:
    """Re-key a shared ZTA activity for a tenant and attach environment status."""
    return {
        **activity,
        "id": tenant_scoped_id(tenant_id, activity["activityId"]),
        "tenantId": tenant_id,
        "environmentStatus": {
            PRIMARY_ENVIRONMENT_ID: {
                "status": _pick(rng, 0.5, ActivityStatus.COMPLETE, ActivityStatus.IN_PROGRESS),
                "maturity": rng.randint(1, 5),
                "lastUpdated": _random_past(rng, now),
                "updatedBy": DEMO_ASSESSOR,
            },
            SECONDARY_ENVIRONMENT_ID: {
                "status": _pick(rng, 0.6, ActivityStatus.IN_PROGRESS, ActivityStatus.PLANNED),
                "maturity": rng.randint(1, 4),
                "lastUpdated": _random_past(rng, now),
                "updatedBy": DEMO_ASSESSOR,
            },
        },
        "overallStatus": _pick(rng, 0.3, ActivityStatus.IN_PROGRESS, ActivityStatus.COMPLETE),
        "overallMaturity": rng.randint(2, 5),
    }


def build_multicloud_seed_sets(
    rng: random.Random | None = None,
    clock: Clock = utc_now,
    tenant_id: str = DEMO_TENANT_ID,
) -> list[SeedSet]:
    """Build every multi-cloud seed set.

    Args:
        rng: Random generator for the status overlay. Pass a seeded
            generator for reproducible output.
        clock: Source of the "now" timestamp used for every record.
        tenant_id: Tenant the shared controls and activities are scoped to.
    """
    rng = rng or random.Random()
    now = clock()

    controls = [overlay_control(c, tenant_id, rng, now) for c in load_seed(NIST_CONTROLS_FILE)]
    activities = [overlay_activity(a, tenant_id, rng, now) for a in load_seed(ZTA_ACTIVITIES_FILE)]

    return [
        SeedSet(container=TENANTS_CONTAINER, records=build_tenant_records(now)),
        SeedSet(container=CLOUD_ENVIRONMENTS_CONTAINER, records=build_cloud_environment_records(now)),
        SeedSet(container=NIST_CONTROLS_ENHANCED_CONTAINER, records=controls),
        SeedSet(container=ZTA_ACTIVITIES_ENHANCED_CONTAINER, records=activities),
        SeedSet(container=EXECUTION_ENABLERS_CONTAINER, records=build_execution_enabler_records(now)),
        SeedSet(container=SSC_METRICS_CONTAINER, records=build_ssc_metric_records(now)),
        SeedSet(
            container=COMPLIANCE_DATA_CONTAINER,
            records=[build_compliance_snapshot(now, tenant_id=tenant_id)],
        ),
    ]


def migrate_multicloud_data(
    cosmos: CosmosClient,
    rng: random.Random | None = None,
    clock: Clock = utc_now,
) -> MigrationSummary:
    """Create the multi-cloud containers and upsert the demo tenant's data.

    poam-items-enhanced and audit-logs are created empty.
    """
    seed_sets = build_multicloud_seed_sets(rng=rng, clock=clock)
    seeded = {s.container.id for s in seed_sets}
    empty = [c for c in MULTICLOUD_CONTAINERS if c.id not in seeded]

    summary = SeedMigrator(cosmos).run(seed_sets, extra_containers=empty)
    logger.info(
        f"Multi-cloud migration complete: {summary.total_upserted} records upserted, "
        f"{summary.total_failed} failed"
    )
    return summary
