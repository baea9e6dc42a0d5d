"""Generic seed migration onto the shared CosmosDB upsert loop."""

from __future__ import annotations

import logging
from typing import Any

from pydantic import BaseModel, Field

from shared import ContainerDefinition, CosmosClient, MigrationSummary

logger = logging.getLogger(__name__)


class SeedSet(BaseModel):
    """Records destined for one container."""

    container: ContainerDefinition
    records: list[dict[str, Any]] = Field(default_factory=list)


class SeedMigrator:
    """Creates containers and upserts seed records into them.

    Container creation errors propagate; item failures are logged and
    recorded on the returned summary. Re-running with unchanged records
    leaves container contents unchanged.
    """

    def __init__(self, cosmos: CosmosClient):
        self.cosmos = cosmos

    def ensure_containers(self, containers: list[ContainerDefinition]) -> None:
        """Create the database and every listed container if missing."""
        logger.info(f"Setting up database {self.cosmos.database_name}")
        self.cosmos.ensure_database()
        for container in containers:
            self.cosmos.ensure_container(container)

    def run(
        self,
        seed_sets: list[SeedSet],
        extra_containers: list[ContainerDefinition] | None = None,
    ) -> MigrationSummary:
        """Migrate seed sets.

        Args:
            seed_sets: Containers and the records to upsert into them.
            extra_containers: Containers to create without seeding.

        Returns:
            MigrationSummary with one UpsertResult per seed set.
        """
        containers = [s.container for s in seed_sets] + list(extra_containers or [])
        self.ensure_containers(containers)

        summary = MigrationSummary(database=self.cosmos.database_name)
        for seed_set in seed_sets:
            container_id = seed_set.container.id
            logger.info(f"Migrating {len(seed_set.records)} records into {container_id}")
            result = self.cosmos.upsert_items(container_id, seed_set.records)
            if result.failed:
                logger.warning(
                    f"{len(result.failed)} of {result.attempted} records failed in {container_id}"
                )
            logger.info(f"Migrated {result.upserted} records into {container_id}")
            summary.results.append(result)

        return summary
