"""Pydantic models for ATO data pipeline contracts."""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class SubscriptionState(str, Enum):
    """Azure subscription lifecycle state."""

    ENABLED = "Enabled"
    DISABLED = "Disabled"
    WARNED = "Warned"
    PAST_DUE = "PastDue"
    DELETED = "Deleted"


class ComplianceStatus(str, Enum):
    """Per-environment control compliance status."""

    COMPLIANT = "compliant"
    PARTIAL = "partial"
    NONCOMPLIANT = "noncompliant"
    NOT_ASSESSED = "not-assessed"


class ActivityStatus(str, Enum):
    """Zero Trust activity / execution enabler progress."""

    COMPLETE = "complete"
    IN_PROGRESS = "in-progress"
    PLANNED = "planned"
    NOT_STARTED = "not-started"


class RiskLevel(str, Enum):
    """Risk level shared by controls, POA&M items and vulnerabilities."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


# =============================================================================
# Export contracts
# =============================================================================


class Subscription(BaseModel):
    """Azure subscription reachable by the injected credential."""

    id: str
    name: str
    tenant_id: str | None = Field(None, alias="tenantId")
    state: str = SubscriptionState.ENABLED.value

    class Config:
        populate_by_name = True


class CosmosConnectionInfo(BaseModel):
    """Keys fetched for a CosmosDB account."""

    endpoint: str | None = None
    primary_key: str | None = Field(None, alias="primaryKey")
    secondary_key: str | None = Field(None, alias="secondaryKey")

    class Config:
        populate_by_name = True


class CosmosAccount(BaseModel):
    """CosmosDB account metadata found during export.

    Extra fields returned by the inventory query (id, location, kind, ...)
    are preserved as-is.
    """

    name: str
    resource_group: str = Field(..., alias="resourceGroup")
    document_endpoint: str | None = Field(None, alias="documentEndpoint")
    connection_info: CosmosConnectionInfo | None = Field(None, alias="connectionInfo")

    class Config:
        populate_by_name = True
        extra = "allow"

    @property
    def has_usable_keys(self) -> bool:
        return bool(self.connection_info and self.connection_info.primary_key)


class ExportSummary(BaseModel):
    """Derived per-subscription statistics."""

    resources_by_type: dict[str, int] = Field(default_factory=dict, alias="resourcesByType")

    class Config:
        populate_by_name = True


class ExportResult(BaseModel):
    """Best-effort export of a single subscription.

    `success` reflects the required pulls (resource groups and resources).
    CosmosDB and security data are optional enrichments whose failures are
    recorded in `cosmosdb_error` / `security_error`.
    """

    subscription: Subscription
    resource_groups: list[dict[str, Any]] = Field(default_factory=list, alias="resourceGroups")
    resources: list[dict[str, Any]] = Field(default_factory=list)
    cosmosdb_accounts: list[CosmosAccount] = Field(default_factory=list, alias="cosmosdbAccounts")
    security_assessments: list[dict[str, Any]] = Field(
        default_factory=list, alias="securityAssessments"
    )
    summary: ExportSummary = Field(default_factory=ExportSummary)
    success: bool = True
    error: str | None = None
    cosmosdb_error: str | None = Field(None, alias="cosmosdbError")
    security_error: str | None = Field(None, alias="securityError")

    class Config:
        populate_by_name = True


class ExportTotals(BaseModel):
    """Totals across all exported subscriptions."""

    total_subscriptions: int = Field(0, alias="totalSubscriptions")
    successful_exports: int = Field(0, alias="successfulExports")
    failed_exports: int = Field(0, alias="failedExports")
    total_resources: int = Field(0, alias="totalResources")
    total_cosmosdb_accounts: int = Field(0, alias="totalCosmosDBAccounts")
    total_resource_groups: int = Field(0, alias="totalResourceGroups")

    class Config:
        populate_by_name = True


class SubscriptionReportEntry(BaseModel):
    """One subscription line of the consolidated summary report."""

    name: str
    id: str
    success: bool
    error: str | None = None
    resource_count: int = Field(0, alias="resourceCount")
    cosmosdb_count: int = Field(0, alias="cosmosDBCount")
    resource_group_count: int = Field(0, alias="resourceGroupCount")

    class Config:
        populate_by_name = True


class ExportReport(BaseModel):
    """Consolidated multi-subscription summary report."""

    export_timestamp: datetime = Field(..., alias="exportTimestamp")
    summary: ExportTotals = Field(default_factory=ExportTotals)
    subscriptions: list[SubscriptionReportEntry] = Field(default_factory=list)
    resource_types_summary: dict[str, int] = Field(
        default_factory=dict, alias="resourceTypesSummary"
    )
    recommendations: list[str] = Field(default_factory=list)

    class Config:
        populate_by_name = True


# =============================================================================
# CosmosDB write contracts
# =============================================================================


class ContainerDefinition(BaseModel):
    """A CosmosDB container and its partition-key path."""

    id: str
    partition_key: str = Field(..., alias="partitionKey")

    class Config:
        populate_by_name = True
        frozen = True


class ItemFailure(BaseModel):
    """An item that could not be written."""

    id: str
    error: str


class UpsertResult(BaseModel):
    """Outcome of upserting a batch of items into one container."""

    container: str
    attempted: int = 0
    upserted: int = 0
    failed: list[ItemFailure] = Field(default_factory=list)


class ImportSummary(BaseModel):
    """Outcome of an import run."""

    cosmos_containers: list[UpsertResult] = Field(default_factory=list, alias="cosmosContainers")
    azure_resources: UpsertResult | None = Field(None, alias="azureResources")
    security_assessments: UpsertResult | None = Field(None, alias="securityAssessments")
    errors: list[str] = Field(default_factory=list)

    class Config:
        populate_by_name = True


class MigrationSummary(BaseModel):
    """Outcome of a seed migration run."""

    database: str
    results: list[UpsertResult] = Field(default_factory=list)

    @property
    def total_upserted(self) -> int:
        return sum(r.upserted for r in self.results)

    @property
    def total_failed(self) -> int:
        return sum(len(r.failed) for r in self.results)


# =============================================================================
# Seed documents
# =============================================================================


class NistControl(BaseModel):
    """NIST SP 800-53 control stored in the nist-controls container."""

    id: str
    control_family: str = Field(..., alias="controlFamily")
    control_identifier: str = Field(..., alias="controlIdentifier")
    control_name: str = Field(..., alias="controlName")
    description: str
    implementation: str | None = None
    risk_level: str | None = Field(None, alias="riskLevel")
    compliance_status: str | None = Field(None, alias="complianceStatus")
    last_assessed: str | None = Field(None, alias="lastAssessed")
    responsible_party: str | None = Field(None, alias="responsibleParty")
    implementation_guidance: str | None = Field(None, alias="implementationGuidance")

    class Config:
        populate_by_name = True


class ZtaActivity(BaseModel):
    """Zero Trust Architecture activity stored in the zta-activities container."""

    id: str
    activity_id: str = Field(..., alias="activityId")
    activity_name: str = Field(..., alias="activityName")
    pillar: str
    phase_level: str = Field(..., alias="phaseLevel")
    status: ActivityStatus
    mapped_controls: list[str] = Field(default_factory=list, alias="mappedControls")
    description: str | None = None
    remediation: str | None = None

    class Config:
        populate_by_name = True
        use_enum_values = True


class PoamItem(BaseModel):
    """Plan of Action and Milestones remediation record."""

    id: str
    title: str
    description: str
    related_controls: list[str] = Field(default_factory=list, alias="relatedControls")
    risk_level: RiskLevel = Field(..., alias="riskLevel")
    status: str
    assignee: str
    due_date: str = Field(..., alias="dueDate")
    created_date: str = Field(..., alias="createdDate")
    last_updated: str = Field(..., alias="lastUpdated")
    mitigation_steps: list[str] = Field(default_factory=list, alias="mitigationSteps")
    evidence: list[str] = Field(default_factory=list)

    class Config:
        populate_by_name = True
        use_enum_values = True


class Vulnerability(BaseModel):
    """Vulnerability record mapped to affected controls."""

    id: str
    vulnerability_id: str = Field(..., alias="vulnerabilityId")
    severity: RiskLevel
    affected_controls: list[str] = Field(default_factory=list, alias="affectedControls")
    description: str
    discovery_date: str = Field(..., alias="discoveryDate")
    status: str
    assignee: str | None = None
    due_date: str | None = Field(None, alias="dueDate")

    class Config:
        populate_by_name = True
        use_enum_values = True


class TenantRole(BaseModel):
    """Role assignment inside a tenant."""

    user_id: str = Field(..., alias="userId")
    email: str
    role: str
    permissions: list[str] = Field(default_factory=list)
    assigned_at: str | None = Field(None, alias="assignedAt")
    assigned_by: str = Field("system", alias="assignedBy")

    class Config:
        populate_by_name = True


class Tenant(BaseModel):
    """Organization using the multi-cloud dashboard."""

    id: str
    organization_name: str = Field(..., alias="organizationName")
    organization_type: str = Field(..., alias="organizationType")
    nist_revision: str = Field("5", alias="nistRevision")
    fed_ramp_level: str = Field("moderate", alias="fedRampLevel")
    database_endpoint: str | None = Field(None, alias="databaseEndpoint")
    key_vault_uri: str | None = Field(None, alias="keyVaultUri")
    roles: list[TenantRole] = Field(default_factory=list)
    cloud_environments: list[str] = Field(default_factory=list, alias="cloudEnvironments")
    created_at: str | None = Field(None, alias="createdAt")
    updated_at: str | None = Field(None, alias="updatedAt")
    is_active: bool = Field(True, alias="isActive")

    class Config:
        populate_by_name = True


class CloudEnvironment(BaseModel):
    """A cloud account/subscription registered for a tenant."""

    id: str
    tenant_id: str = Field(..., alias="tenantId")
    name: str
    provider: str
    credentials: dict[str, Any] = Field(default_factory=dict)
    region: str | None = None
    is_active: bool = Field(True, alias="isActive")
    last_sync: str | None = Field(None, alias="lastSync")
    sync_status: str = Field("connected", alias="syncStatus")
    created_at: str | None = Field(None, alias="createdAt")
    updated_at: str | None = Field(None, alias="updatedAt")

    class Config:
        populate_by_name = True


class ExecutionEnabler(BaseModel):
    """DOTmLPF-P execution enabler tracked per tenant."""

    id: str
    tenant_id: str = Field(..., alias="tenantId")
    category: str
    name: str
    description: str
    status: ActivityStatus
    assignee: str | None = None
    due_date: str | None = Field(None, alias="dueDate")
    last_updated: str | None = Field(None, alias="lastUpdated")
    updated_by: str | None = Field(None, alias="updatedBy")
    evidence: list[str] = Field(default_factory=list)

    class Config:
        populate_by_name = True
        use_enum_values = True


class SscMetrics(BaseModel):
    """Software supply chain scan results for one environment."""

    id: str
    tenant_id: str = Field(..., alias="tenantId")
    environment_id: str = Field(..., alias="environmentId")
    sast_results: dict[str, Any] = Field(default_factory=dict, alias="sastResults")
    sca_results: dict[str, Any] = Field(default_factory=dict, alias="scaResults")
    container_security: dict[str, Any] = Field(default_factory=dict, alias="containerSecurity")
    collected_at: str | None = Field(None, alias="collectedAt")

    class Config:
        populate_by_name = True


class ComplianceFinding(BaseModel):
    """A failed rule reported by a cloud provider's compliance scan."""

    id: str
    provider: str
    severity: RiskLevel
    status: str
    mapped_controls: list[str] = Field(default_factory=list, alias="mappedControls")
    resource_id: str = Field(..., alias="resourceId")
    rule_name: str = Field(..., alias="ruleName")
    description: str | None = None
    remediation: str | None = None
    discovered_at: str | None = Field(None, alias="discoveredAt")
    last_checked: str | None = Field(None, alias="lastChecked")

    class Config:
        populate_by_name = True
        use_enum_values = True


class ComplianceData(BaseModel):
    """Compliance snapshot collected from one environment."""

    id: str
    tenant_id: str = Field(..., alias="tenantId")
    environment_id: str = Field(..., alias="environmentId")
    provider: str
    collected_at: str = Field(..., alias="collectedAt")
    raw_data: dict[str, Any] = Field(default_factory=dict, alias="rawData")
    findings: list[ComplianceFinding] = Field(default_factory=list)

    class Config:
        populate_by_name = True
