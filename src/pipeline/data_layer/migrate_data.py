"""Seed the standard dashboard containers with bundled compliance data."""

from __future__ import annotations

import logging
from typing import Any

from pydantic import BaseModel

from shared import (
    ContainerDefinition,
    CosmosClient,
    MigrationSummary,
    NistControl,
    PoamItem,
    Vulnerability,
    ZtaActivity,
)
from seed_data import (
    NIST_CONTROLS_FILE,
    POAM_ITEMS_FILE,
    VULNERABILITIES_FILE,
    ZTA_ACTIVITIES_FILE,
    load_seed,
)
from data_layer.seed_migrator import SeedMigrator, SeedSet

logger = logging.getLogger(__name__)

NIST_CONTROLS_CONTAINER = ContainerDefinition(
    id=CosmosClient.NIST_CONTROLS, partitionKey="/controlIdentifier"
)
ZTA_ACTIVITIES_CONTAINER = ContainerDefinition(id=CosmosClient.ZTA_ACTIVITIES, partitionKey="/pillar")
POAM_ITEMS_CONTAINER = ContainerDefinition(id=CosmosClient.POAM_ITEMS, partitionKey="/status")
VULNERABILITIES_CONTAINER = ContainerDefinition(
    id=CosmosClient.VULNERABILITIES, partitionKey="/severity"
)
CONTROL_HISTORY_CONTAINER = ContainerDefinition(
    id=CosmosClient.CONTROL_HISTORY, partitionKey="/controlIdentifier"
)

STANDARD_CONTAINERS = (
    NIST_CONTROLS_CONTAINER,
    ZTA_ACTIVITIES_CONTAINER,
    POAM_ITEMS_CONTAINER,
    VULNERABILITIES_CONTAINER,
    CONTROL_HISTORY_CONTAINER,
)


def _documents(model: type[BaseModel], records: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Validate raw seed records and dump them with their stored field names."""
    return [
        model.model_validate(record).model_dump(by_alias=True, exclude_none=True)
        for record in records
    ]


def build_seed_sets() -> list[SeedSet]:
    """Load the bundled standard seed data."""
    return [
        SeedSet(
            container=NIST_CONTROLS_CONTAINER,
            records=_documents(NistControl, load_seed(NIST_CONTROLS_FILE)),
        ),
        SeedSet(
            container=ZTA_ACTIVITIES_CONTAINER,
            records=_documents(ZtaActivity, load_seed(ZTA_ACTIVITIES_FILE)),
        ),
        SeedSet(
            container=POAM_ITEMS_CONTAINER,
            records=_documents(PoamItem, load_seed(POAM_ITEMS_FILE)),
        ),
        SeedSet(
            container=VULNERABILITIES_CONTAINER,
            records=_documents(Vulnerability, load_seed(VULNERABILITIES_FILE)),
        ),
    ]


def migrate_data(cosmos: CosmosClient, seed_sets: list[SeedSet] | None = None) -> MigrationSummary:
    """Create the standard containers and upsert the bundled seed data.

    control-history is created empty; it is filled by the dashboard.
    """
    seed_sets = seed_sets if seed_sets is not None else build_seed_sets()
    summary = SeedMigrator(cosmos).run(seed_sets, extra_containers=[CONTROL_HISTORY_CONTAINER])
    logger.info(
        f"Standard migration complete: {summary.total_upserted} records upserted, "
        f"{summary.total_failed} failed"
    )
    return summary
