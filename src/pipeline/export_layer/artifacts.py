"""Write export artifacts to the export directory."""

from __future__ import annotations

import json
import logging
import re
from pathlib import Path

from shared import ExportReport, ExportResult

logger = logging.getLogger(__name__)

DEFAULT_EXPORT_DIR = "exported-data"

SUMMARY_FILENAME = "multi-subscription-summary.json"
ENV_CONFIG_FILENAME = "env-config.txt"
INSTRUCTIONS_FILENAME = "IMPORT_INSTRUCTIONS.md"

TEMPLATES_DIR = Path(__file__).parent / "templates"


def ensure_export_dir(export_dir: str | Path) -> Path:
    """Create the export directory if needed and return it."""
    path = Path(export_dir)
    if not path.exists():
        path.mkdir(parents=True, exist_ok=True)
        logger.info(f"Created export directory: {path}")
    return path


def subscription_filename(subscription_name: str) -> str:
    """File name for a subscription dump; non-alphanumerics become '-'."""
    return f"subscription-{re.sub(r'[^a-zA-Z0-9]', '-', subscription_name)}-data.json"


def _write_json(path: Path, data: dict) -> None:
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, default=str)


def write_subscription_data(export_dir: Path, result: ExportResult) -> Path:
    """Write one subscription's export as JSON."""
    path = export_dir / subscription_filename(result.subscription.name)
    _write_json(path, result.model_dump(by_alias=True, mode="json"))
    logger.info(f"Saved data to {path.name}")
    return path


def write_summary_report(export_dir: Path, report: ExportReport) -> Path:
    """Write the consolidated summary report."""
    path = export_dir / SUMMARY_FILENAME
    _write_json(path, report.model_dump(by_alias=True, mode="json"))
    logger.info(f"Summary report saved to {path}")
    return path


def write_env_config(export_dir: Path, env_config: str) -> Path:
    """Write the generated environment configuration."""
    path = export_dir / ENV_CONFIG_FILENAME
    path.write_text(env_config, encoding="utf-8")
    logger.info(f"Environment configuration saved to {path}")
    return path


def load_import_instructions() -> str:
    """Load the import instructions template."""
    with open(TEMPLATES_DIR / INSTRUCTIONS_FILENAME, encoding="utf-8") as f:
        return f.read()


def write_import_instructions(export_dir: Path) -> Path:
    """Write the Markdown import instructions."""
    path = export_dir / INSTRUCTIONS_FILENAME
    path.write_text(load_import_instructions(), encoding="utf-8")
    logger.info(f"Import instructions saved to {path}")
    return path
