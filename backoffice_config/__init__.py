"""
backoffice_config -- single public entrypoint for back-office configuration.

Responsibility:
    Provides the runtime configuration through ``get_active_config()``,
    which loads a YAML document (the shipped ``defaults.yaml`` unless a
    path is given) and returns a frozen ``BackofficeSettings`` bundle of
    the per-module config objects.

Architecture position:
    Configuration -- sits above ``backoffice_kernel`` and
    ``backoffice_modules``.  The kernel MUST NEVER import from
    ``backoffice_config``.

Invariants enforced:
    - Deterministic loading: the same document always produces settings
      with the same checksum.
    - Unknown sections are rejected.

Failure modes:
    - ``FileNotFoundError`` -- the requested document does not exist.
    - ``yaml.YAMLError`` -- the document is not valid YAML.
    - ``ConfigurationError`` -- unknown section or invalid section values.

Audit relevance:
    Every successful ``get_active_config()`` call emits a
    ``BACKOFFICE_CONFIG_TRACE`` log entry with the config_id, version and
    checksum, tying report output to the configuration that produced it.
"""

from __future__ import annotations

import logging
from pathlib import Path

from backoffice_config.loader import compute_checksum, load_yaml_file, parse_settings
from backoffice_config.schema import BackofficeSettings, LedgerSettings

_logger = logging.getLogger("backoffice.config")

DEFAULT_CONFIG_PATH = Path(__file__).parent / "defaults.yaml"


def get_active_config(path: Path | str | None = None) -> BackofficeSettings:
    """
    The public configuration entrypoint.

    Non-goals:
        - Does NOT cache across calls; callers hold the returned settings.

    Args:
        path: YAML document to load.  Defaults to the shipped
            ``defaults.yaml``.
    """
    source = Path(path) if path is not None else DEFAULT_CONFIG_PATH
    settings = parse_settings(load_yaml_file(source))

    _logger.info(
        "BACKOFFICE_CONFIG_TRACE",
        extra={
            "trace_type": "BACKOFFICE_CONFIG_TRACE",
            "config_id": settings.config_id,
            "config_version": settings.version,
            "checksum": settings.checksum,
            "source": str(source),
        },
    )
    return settings


__all__ = [
    "BackofficeSettings",
    "DEFAULT_CONFIG_PATH",
    "LedgerSettings",
    "compute_checksum",
    "get_active_config",
    "load_yaml_file",
    "parse_settings",
]
