"""
Configuration Loader (``backoffice_config.loader``).

Responsibility
--------------
Reads a YAML configuration document and turns each section into the
owning module's config dataclass via its ``from_dict``.  Runtime callers
go through ``backoffice_config.get_active_config()``.

Invariants enforced
-------------------
* Only ``yaml.safe_load`` is used.
* Unknown top-level sections are rejected, never ignored.
* ``compute_checksum`` is deterministic: identical documents always
  produce identical checksums.

Failure modes
-------------
* Missing file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Unknown section, non-mapping section or invalid section values
  -> ``ConfigurationError`` naming the section.
"""

from __future__ import annotations

import hashlib
import json
from collections.abc import Callable
from pathlib import Path
from typing import Any

import yaml

from backoffice_config.schema import BackofficeSettings, LedgerSettings
from backoffice_kernel.exceptions import ConfigurationError
from backoffice_kernel.logging_config import get_logger
from backoffice_modules.aging.config import AgingConfig
from backoffice_modules.budget.config import BudgetConfig
from backoffice_modules.centers.config import CenterConfig
from backoffice_modules.departmental.config import DepartmentalConfig
from backoffice_modules.reporting.config import CashFlowConfig, ReportingConfig

logger = get_logger("config.loader")

METADATA_KEYS = ("config_id", "version")

SECTION_PARSERS: dict[str, Callable[[dict], Any]] = {
    "ledger": lambda data: LedgerSettings(**data),
    "reporting": ReportingConfig.from_dict,
    "cash_flow": CashFlowConfig.from_dict,
    "aging": AgingConfig.from_dict,
    "budget": BudgetConfig.from_dict,
    "departmental": DepartmentalConfig.from_dict,
    "centers": CenterConfig.from_dict,
}


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
        ConfigurationError: if the document is not a mapping.
    """
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ConfigurationError("<document>", "top level must be a mapping")
    return data


def compute_checksum(data: dict[str, Any]) -> str:
    """SHA-256 of the canonical JSON serialization of ``data``."""
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()


def parse_settings(data: dict[str, Any]) -> BackofficeSettings:
    """
    Build ``BackofficeSettings`` from a parsed document.

    Sections that are absent keep their module defaults.
    """
    unknown = sorted(set(data) - set(SECTION_PARSERS) - set(METADATA_KEYS))
    if unknown:
        raise ConfigurationError(unknown[0], "unknown configuration section")

    sections: dict[str, Any] = {}
    for name, parser in SECTION_PARSERS.items():
        if name not in data or data[name] is None:
            continue
        raw = data[name]
        if not isinstance(raw, dict):
            raise ConfigurationError(name, "section must be a mapping")
        try:
            sections[name] = parser(raw)
        except (TypeError, ValueError, KeyError) as exc:
            raise ConfigurationError(name, str(exc)) from exc

    return BackofficeSettings(
        config_id=str(data.get("config_id", "default")),
        version=str(data.get("version", "1")),
        checksum=compute_checksum(data),
        **sections,
    )
