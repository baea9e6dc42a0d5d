"""Data layer for the ATO dashboard's CosmosDB database.

This module provides the one-shot jobs that write to CosmosDB:
- Import (source CosmosDB containers, Azure resources, security assessments)
- Standard seed migration (NIST controls, ZTA activities, POA&M, vulnerabilities)
- Multi-cloud seed migration (tenant-scoped containers with status overlay)
"""

from data_layer.import_azure_data import (
    import_cosmos_data,
    import_azure_resources,
    import_security_assessments,
    run_import,
    write_import_report,
)
from data_layer.seed_migrator import SeedMigrator, SeedSet
from data_layer.migrate_data import migrate_data
from data_layer.migrate_multicloud_data import migrate_multicloud_data

__all__ = [
    "import_cosmos_data",
    "import_azure_resources",
    "import_security_assessments",
    "run_import",
    "write_import_report",
    "SeedMigrator",
    "SeedSet",
    "migrate_data",
    "migrate_multicloud_data",
]
