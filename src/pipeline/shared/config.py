"""Environment-driven configuration for the data importer.

Values are read from environment variables; the CLI loads `.env.local` /
`.env` into the environment before building these objects.
"""

from __future__ import annotations

import os
from enum import Enum
from typing import Mapping

from pydantic import BaseModel, Field

from shared.exceptions import ConfigurationError

DEFAULT_TARGET_DATABASE = "cato-dashboard-local"


class ImportStage(str, Enum):
    """Independent parts of an import run."""

    COSMOS = "cosmos"
    RESOURCES = "resources"
    SECURITY = "security"


ALL_STAGES = (ImportStage.COSMOS, ImportStage.RESOURCES, ImportStage.SECURITY)


def _first(env: Mapping[str, str], *names: str) -> str | None:
    """Return the first non-empty value among several variable names."""
    for name in names:
        value = env.get(name)
        if value:
            return value
    return None


class ImportConfig(BaseModel):
    """Source and target settings for an import run."""

    source_subscription_id: str | None = Field(None, alias="sourceSubscriptionId")
    source_resource_group: str | None = Field(None, alias="sourceResourceGroup")
    source_cosmos_endpoint: str | None = Field(None, alias="sourceCosmosEndpoint")
    source_cosmos_key: str | None = Field(None, alias="sourceCosmosKey")
    source_cosmos_database: str | None = Field(None, alias="sourceCosmosDatabase")

    target_cosmos_endpoint: str | None = Field(None, alias="targetCosmosEndpoint")
    target_cosmos_key: str | None = Field(None, alias="targetCosmosKey")
    target_cosmos_database: str = Field(DEFAULT_TARGET_DATABASE, alias="targetCosmosDatabase")

    class Config:
        populate_by_name = True

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> "ImportConfig":
        """Build configuration from environment variables.

        Target settings fall back from the AZURE_COSMOS_* names to the
        VITE_COSMOS_DB_* names used by the dashboard front end.
        """
        env = os.environ if env is None else env
        return cls(
            sourceSubscriptionId=_first(env, "AZURE_SOURCE_SUBSCRIPTION_ID"),
            sourceResourceGroup=_first(env, "AZURE_SOURCE_RESOURCE_GROUP"),
            sourceCosmosEndpoint=_first(env, "AZURE_SOURCE_COSMOS_ENDPOINT"),
            sourceCosmosKey=_first(env, "AZURE_SOURCE_COSMOS_KEY"),
            sourceCosmosDatabase=_first(env, "AZURE_SOURCE_COSMOS_DATABASE"),
            targetCosmosEndpoint=_first(env, "AZURE_COSMOS_ENDPOINT", "VITE_COSMOS_DB_ENDPOINT"),
            targetCosmosKey=_first(env, "AZURE_COSMOS_KEY", "VITE_COSMOS_DB_KEY"),
            targetCosmosDatabase=_first(env, "AZURE_COSMOS_DATABASE_NAME", "VITE_COSMOS_DB_NAME")
            or DEFAULT_TARGET_DATABASE,
        )

    @property
    def has_source_cosmos(self) -> bool:
        """True when a source CosmosDB database is fully configured."""
        return bool(
            self.source_cosmos_endpoint and self.source_cosmos_key and self.source_cosmos_database
        )

    def validate_for(self, stages: tuple[ImportStage, ...] = ALL_STAGES) -> None:
        """Check that the variables needed by the selected stages are set.

        Raises:
            ConfigurationError: Listing every missing variable.
        """
        missing = []
        if not self.target_cosmos_endpoint:
            missing.append("AZURE_COSMOS_ENDPOINT")
        if not self.target_cosmos_key:
            missing.append("AZURE_COSMOS_KEY")
        needs_subscription = ImportStage.RESOURCES in stages or ImportStage.SECURITY in stages
        if needs_subscription and not self.source_subscription_id:
            missing.append("AZURE_SOURCE_SUBSCRIPTION_ID")

        if missing:
            raise ConfigurationError(
                "Missing required environment variables: " + ", ".join(missing),
                missing=missing,
            )

    def masked(self) -> dict[str, str | None]:
        """Configuration for reports, with keys replaced by '***'."""
        data = self.model_dump(by_alias=True)
        data["sourceCosmosKey"] = "***" if self.source_cosmos_key else None
        data["targetCosmosKey"] = "***" if self.target_cosmos_key else None
        return data
