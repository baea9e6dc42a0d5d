"""Local development setup checks.

Verifies the interpreter version, the `.env.local` Azure sign-in settings,
installed libraries, CosmosDB Emulator reachability and the bundled seed
data, and reports each check as passed or failed.
"""

from __future__ import annotations

import importlib.util
import logging
import re
import sys
import warnings
from pathlib import Path

import requests
from dotenv import dotenv_values
from pydantic import BaseModel, Field
from urllib3.exceptions import InsecureRequestWarning

from seed_data import SEED_DIR, missing_seed_files

logger = logging.getLogger(__name__)

MIN_PYTHON = (3, 10)
DEFAULT_ENV_FILE = ".env.local"
EMULATOR_URL = "https://localhost:8081"
EMULATOR_TIMEOUT_SECONDS = 3
PLACEHOLDER_MARKER = "your-"

REQUIRED_AZURE_VARS = ("VITE_AZURE_CLIENT_ID", "VITE_AZURE_AUTHORITY")

# Import names, not distribution names
REQUIRED_LIBRARIES = (
    "azure.cosmos",
    "azure.identity",
    "azure.mgmt.resourcegraph",
    "azure.mgmt.subscription",
    "azure.mgmt.cosmosdb",
    "pydantic",
    "requests",
    "dotenv",
)

GUID_PATTERN = r"[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}"
GUID_RE = re.compile(rf"^{GUID_PATTERN}$", re.IGNORECASE)
AUTHORITY_TENANT_RE = re.compile(rf"/({GUID_PATTERN})$", re.IGNORECASE)


class CheckResult(BaseModel):
    """Outcome of a single setup check."""

    name: str
    passed: bool
    message: str


class ValidationReport(BaseModel):
    """All setup checks in the order they ran."""

    checks: list[CheckResult] = Field(default_factory=list)

    @property
    def passed(self) -> bool:
        return all(check.passed for check in self.checks)

    @property
    def failures(self) -> list[CheckResult]:
        return [check for check in self.checks if not check.passed]

    def add(self, name: str, passed: bool, message: str) -> None:
        level = logging.INFO if passed else logging.WARNING
        logger.log(level, f"{name}: {message}")
        self.checks.append(CheckResult(name=name, passed=passed, message=message))


def is_placeholder(value: str | None) -> bool:
    return not value or PLACEHOLDER_MARKER in value


def check_python_version(report: ValidationReport, version: tuple[int, ...] | None = None) -> None:
    version = version or tuple(sys.version_info[:3])
    label = ".".join(str(part) for part in version)
    required = ".".join(str(part) for part in MIN_PYTHON)
    if tuple(version[:2]) >= MIN_PYTHON:
        report.add("python", True, f"Python {label} (compatible)")
    else:
        report.add("python", False, f"Python {label} (requires {required}+)")


def check_env_file(report: ValidationReport, env_path: Path) -> dict[str, str | None]:
    """Check the Azure sign-in settings in the environment file.

    Returns:
        The parsed variables, or an empty dict if the file does not exist.
    """
    if not env_path.exists():
        report.add("env-file", False, f"{env_path.name} file not found")
        return {}

    report.add("env-file", True, f"{env_path.name} file exists")
    env = dotenv_values(env_path)

    for name in REQUIRED_AZURE_VARS:
        if is_placeholder(env.get(name)):
            report.add(name, False, f"{name} not properly configured")
        else:
            report.add(name, True, f"{name} configured")

    client_id = env.get("VITE_AZURE_CLIENT_ID")
    if not is_placeholder(client_id):
        if GUID_RE.match(client_id):
            report.add("client-id-format", True, "Client ID format is valid")
        else:
            report.add("client-id-format", False, "Client ID format is invalid (should be a GUID)")

    authority = env.get("VITE_AZURE_AUTHORITY")
    if not is_placeholder(authority):
        if AUTHORITY_TENANT_RE.search(authority):
            report.add("authority-format", True, "Tenant ID format is valid")
        else:
            report.add(
                "authority-format",
                False,
                "Authority URL format is invalid (should end with tenant GUID)",
            )

    return env


def is_importable(name: str) -> bool:
    try:
        return importlib.util.find_spec(name) is not None
    except ModuleNotFoundError:
        # Parent package (e.g. azure.mgmt) is not installed
        return False


def check_libraries(report: ValidationReport, libraries: tuple[str, ...] = REQUIRED_LIBRARIES) -> None:
    missing = [name for name in libraries if not is_importable(name)]
    if missing:
        report.add("libraries", False, f"Missing libraries: {', '.join(missing)}")
    else:
        report.add("libraries", True, f"{len(libraries)} required libraries installed")


def check_emulator(report: ValidationReport, env: dict[str, str | None]) -> None:
    """Probe the CosmosDB Emulator when the environment file points at it."""
    if not any(value and EMULATOR_URL in value for value in env.values()):
        logger.info("Using Azure Cosmos DB (not local emulator)")
        return

    try:
        # Emulator uses a self-signed certificate
        with warnings.catch_warnings():
            warnings.simplefilter("ignore", InsecureRequestWarning)
            response = requests.get(EMULATOR_URL, timeout=EMULATOR_TIMEOUT_SECONDS, verify=False)
    except requests.exceptions.Timeout:
        report.add("emulator", False, "Cosmos DB Emulator connection timeout")
        return
    except requests.exceptions.RequestException:
        report.add("emulator", False, "Cosmos DB Emulator is not running")
        return

    if response.status_code in (200, 401):
        report.add("emulator", True, "Cosmos DB Emulator is running")
    else:
        report.add(
            "emulator",
            False,
            f"Cosmos DB Emulator responded with status {response.status_code}",
        )


def check_seed_data(report: ValidationReport, seed_dir: Path = SEED_DIR) -> None:
    missing = missing_seed_files(seed_dir)
    if missing:
        report.add("seed-data", False, f"Seed files missing: {', '.join(missing)}")
    else:
        report.add("seed-data", True, "Bundled seed data present")


def validate_setup(
    project_root: str | Path = ".",
    env_file: str = DEFAULT_ENV_FILE,
    seed_dir: Path = SEED_DIR,
) -> ValidationReport:
    """Run every local development check.

    Args:
        project_root: Directory containing the environment file.
        env_file: Environment file name relative to project_root.
        seed_dir: Directory holding the bundled seed data.

    Returns:
        ValidationReport; `passed` is False if any check failed.
    """
    report = ValidationReport()
    check_python_version(report)
    env = check_env_file(report, Path(project_root) / env_file)
    check_libraries(report)
    check_emulator(report, env)
    check_seed_data(report, seed_dir)
    return report
