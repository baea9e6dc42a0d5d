#!/usr/bin/env python3
"""Run the ATO compliance data pipeline.

Subcommands:
    export              Export subscription inventories and build the summary report
    import              Import Azure data into the dashboard's CosmosDB database
    migrate             Seed the standard dashboard containers
    migrate-multicloud  Seed the multi-cloud (tenant-scoped) containers
    validate            Check the local development setup

Environment Variables:
    AZURE_SUBSCRIPTION_ID: Subscription exported when no selector is given
    AZURE_COSMOS_ENDPOINT / AZURE_COSMOS_KEY / AZURE_COSMOS_DATABASE_NAME:
        Target CosmosDB database (VITE_COSMOS_DB_* also accepted)
    AZURE_SOURCE_*: Import sources, as written to env-config.txt by `export`

Usage:
    # Export the current subscription
    ato-pipeline export

    # Export every enabled subscription
    ato-pipeline export --all

    # Export one subscription by id or (partial) name
    ato-pipeline export --subscription=prod

    # Import only resource metadata
    ato-pipeline import --resources-only
"""

from __future__ import annotations

import argparse
import logging
import random
import sys
from datetime import datetime, timezone
from pathlib import Path

from dotenv import load_dotenv

from shared import (
    ALL_STAGES,
    CosmosClient,
    ExportResult,
    ImportConfig,
    ImportStage,
    MigrationSummary,
    PipelineError,
    SubscriptionNotFoundError,
    get_credential,
    list_enabled_subscriptions,
    select_subscriptions,
    top_counts,
)
from shared.setup_validation import DEFAULT_ENV_FILE, validate_setup
from export_layer import (
    DEFAULT_EXPORT_DIR,
    SubscriptionExporter,
    build_export_report,
    ensure_export_dir,
    export_subscriptions,
    generate_env_config,
    write_env_config,
    write_import_instructions,
    write_subscription_data,
    write_summary_report,
)
from data_layer import migrate_data, migrate_multicloud_data, run_import, write_import_report

logger = logging.getLogger(__name__)

DEFAULT_REPORT_PATH = "import-report.json"
FALLBACK_ENV_FILE = ".env"


def configure_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    # Azure SDK request logging is noisy at INFO
    logging.getLogger("azure").setLevel(logging.WARNING)


def load_environment(env_file: str | None = None) -> Path | None:
    """Load an env file into os.environ without overriding existing variables.

    Returns:
        The file that was loaded, or None.
    """
    candidates = [env_file] if env_file else [DEFAULT_ENV_FILE, FALLBACK_ENV_FILE]
    for candidate in candidates:
        path = Path(candidate)
        if path.exists():
            load_dotenv(path, override=False)
            logger.debug(f"Loaded environment from {path}")
            return path
    return None


# =============================================================================
# Commands
# =============================================================================


def _print_export_result(result: ExportResult) -> None:
    name = result.subscription.name
    if not result.success:
        print(f"  {name}: FAILED - {result.error}")
        return
    print(
        f"  {name}: {len(result.resources)} resources, "
        f"{len(result.cosmosdb_accounts)} CosmosDB accounts"
    )
    if result.cosmosdb_error:
        print(f"    CosmosDB warning: {result.cosmosdb_error}")
    if result.security_error:
        print(f"    Security warning: {result.security_error}")


def cmd_export(args: argparse.Namespace) -> int:
    credential = get_credential()
    subscriptions = list_enabled_subscriptions(credential)
    selected = select_subscriptions(
        subscriptions,
        all_subscriptions=args.all_subscriptions,
        subscription=args.subscription,
    )

    export_dir = ensure_export_dir(args.output_dir)
    exporter = SubscriptionExporter(credential)

    print(f"Exporting {len(selected)} subscription(s) to {export_dir}")
    results = export_subscriptions(exporter, selected, on_result=_print_export_result)

    for result in results:
        if result.success:
            write_subscription_data(export_dir, result)

    generated_at = datetime.now(timezone.utc)
    report = build_export_report(results, generated_at)
    write_summary_report(export_dir, report)
    write_env_config(export_dir, generate_env_config(results, generated_at))
    write_import_instructions(export_dir)

    totals = report.summary
    print("\n" + "=" * 60)
    print("EXPORT SUMMARY")
    print("=" * 60)
    print(f"  Subscriptions processed: {totals.total_subscriptions}")
    print(f"  Successful exports: {totals.successful_exports}")
    print(f"  Failed exports: {totals.failed_exports}")
    print(f"  Total resources: {totals.total_resources}")
    print(f"  Total resource groups: {totals.total_resource_groups}")
    print(f"  Total CosmosDB accounts: {totals.total_cosmosdb_accounts}")
    if report.resource_types_summary:
        print("  Top resource types:")
        for resource_type, count in top_counts(report.resource_types_summary, 10):
            print(f"    {resource_type}: {count}")
    for recommendation in report.recommendations:
        print(f"  Recommendation: {recommendation}")

    return 0 if totals.successful_exports else 1


def selected_stages(args: argparse.Namespace) -> tuple[ImportStage, ...]:
    if args.cosmos_only:
        return (ImportStage.COSMOS,)
    if args.resources_only:
        return (ImportStage.RESOURCES,)
    if args.security_only:
        return (ImportStage.SECURITY,)
    return ALL_STAGES


def cmd_import(args: argparse.Namespace) -> int:
    config = ImportConfig.from_env()
    stages = selected_stages(args)

    print(f"Importing into database {config.target_cosmos_database}")
    print(f"  Stages: {', '.join(stage.value for stage in stages)}")

    credential = get_credential() if stages != (ImportStage.COSMOS,) else None
    summary = run_import(config, stages=stages, credential=credential)
    report_path = write_import_report(args.report_path, config, summary)

    print("\n" + "=" * 60)
    print("IMPORT SUMMARY")
    print("=" * 60)
    for result in summary.cosmos_containers:
        print(f"  {result.container}: {result.upserted}/{result.attempted} items")
    if summary.azure_resources:
        print(f"  Azure resources: {summary.azure_resources.upserted}")
    if summary.security_assessments:
        print(f"  Security assessments: {summary.security_assessments.upserted}")
    if summary.errors:
        print(f"  Errors: {len(summary.errors)}")
        for error in summary.errors:
            print(f"    - {error}")
    print(f"  Report: {report_path}")

    return 0 if not summary.errors else 1


def _print_migration_summary(title: str, summary: MigrationSummary) -> None:
    print("\n" + "=" * 60)
    print(title)
    print("=" * 60)
    print(f"  Database: {summary.database}")
    for result in summary.results:
        print(f"  {result.container}: {result.upserted}/{result.attempted} records")
        for failure in result.failed:
            print(f"    - {failure.id}: {failure.error}")
    print(f"  Total upserted: {summary.total_upserted}")
    if summary.total_failed:
        print(f"  Total failed: {summary.total_failed}")


def cmd_migrate(args: argparse.Namespace) -> int:
    summary = migrate_data(CosmosClient())
    _print_migration_summary("MIGRATION SUMMARY", summary)
    return 0


def cmd_migrate_multicloud(args: argparse.Namespace) -> int:
    rng = random.Random(args.seed) if args.seed is not None else None
    summary = migrate_multicloud_data(CosmosClient(), rng=rng)
    _print_migration_summary("MULTI-CLOUD MIGRATION SUMMARY", summary)
    return 0


def cmd_validate(args: argparse.Namespace) -> int:
    report = validate_setup(args.project_root, env_file=args.env_file or DEFAULT_ENV_FILE)

    print("\n" + "=" * 60)
    print("VALIDATION SUMMARY")
    print("=" * 60)
    for check in report.checks:
        marker = "OK  " if check.passed else "FAIL"
        print(f"  [{marker}] {check.message}")

    if report.passed:
        print("\nAll checks passed. Next: ato-pipeline migrate")
        return 0
    print(f"\n{len(report.failures)} check(s) failed")
    return 1


# =============================================================================
# Entry point
# =============================================================================


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Run the ATO compliance data pipeline")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument(
        "--env-file",
        help=f"Environment file to load (default: {DEFAULT_ENV_FILE}, then {FALLBACK_ENV_FILE})",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    export_parser = subparsers.add_parser("export", help="Export subscription inventories")
    export_parser.add_argument(
        "--all",
        "--all-subscriptions",
        dest="all_subscriptions",
        action="store_true",
        help="Export every enabled subscription",
    )
    export_parser.add_argument(
        "--subscription",
        help="Subscription id or name (substring match) to export",
    )
    export_parser.add_argument(
        "--output-dir",
        default=DEFAULT_EXPORT_DIR,
        help=f"Directory for export artifacts (default: {DEFAULT_EXPORT_DIR})",
    )
    export_parser.set_defaults(func=cmd_export)

    import_parser = subparsers.add_parser("import", help="Import Azure data into CosmosDB")
    stage_group = import_parser.add_mutually_exclusive_group()
    stage_group.add_argument("--cosmos-only", action="store_true", help="Only copy CosmosDB data")
    stage_group.add_argument(
        "--resources-only", action="store_true", help="Only import resource metadata"
    )
    stage_group.add_argument(
        "--security-only", action="store_true", help="Only import security assessments"
    )
    import_parser.add_argument(
        "--report-path",
        default=DEFAULT_REPORT_PATH,
        help=f"Where to write the import report (default: {DEFAULT_REPORT_PATH})",
    )
    import_parser.set_defaults(func=cmd_import)

    migrate_parser = subparsers.add_parser("migrate", help="Seed the standard containers")
    migrate_parser.set_defaults(func=cmd_migrate)

    multicloud_parser = subparsers.add_parser(
        "migrate-multicloud", help="Seed the multi-cloud containers"
    )
    multicloud_parser.add_argument(
        "--seed", type=int, help="Random seed for a reproducible status overlay"
    )
    multicloud_parser.set_defaults(func=cmd_migrate_multicloud)

    validate_parser = subparsers.add_parser("validate", help="Check the local development setup")
    validate_parser.add_argument(
        "--project-root", default=".", help="Directory containing the env file (default: .)"
    )
    validate_parser.set_defaults(func=cmd_validate)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    configure_logging(args.verbose)
    if args.command != "validate":
        load_environment(args.env_file)

    try:
        return args.func(args)
    except SubscriptionNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        if e.available:
            print("Available subscriptions:", file=sys.stderr)
            for sub in e.available:
                print(f"  - {sub.name} ({sub.id})", file=sys.stderr)
        return 1
    except PipelineError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
