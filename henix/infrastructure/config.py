"""
Configuration Module

Architectural Intent:
- Centralized configuration loading from a JSON file (henix.json)
- Provides typed access to all henix settings
- Falls back to sensible defaults when config file is absent
- Environment variables override file-based config

Design Decisions:
- Config is a frozen dataclass for immutability after load
- Nested config sections map to sub-dataclasses
- The `nodes` section is kept as a raw mapping; it is validated when the
  targets are resolved
"""

from __future__ import annotations
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional
import dataclasses
import json
import logging
import os

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = "henix.json"


@dataclass(frozen=True)
class DeploySettings:
    """Deployment protocol settings."""
    base_dir: str = "/etc/henix"
    mode: str = "switch"
    show_trace: bool = False
    check_existing: bool = True
    parallel: bool = True
    max_parallel: int = 0


@dataclass(frozen=True)
class SSHSettings:
    """SSH connection settings."""
    user: str = "root"
    connect_timeout: int = 30


@dataclass(frozen=True)
class TransportSettings:
    """File transport settings."""
    rsync_path: str = "rsync"
    timeout: int = 600


@dataclass(frozen=True)
class TelemetrySettings:
    """OpenTelemetry configuration."""
    endpoint: str = ""
    insecure: bool = False


@dataclass(frozen=True)
class HenixConfig:
    """Root configuration for henix."""
    deploy: DeploySettings = field(default_factory=DeploySettings)
    ssh: SSHSettings = field(default_factory=SSHSettings)
    transport: TransportSettings = field(default_factory=TransportSettings)
    telemetry: TelemetrySettings = field(default_factory=TelemetrySettings)
    nodes: dict[str, Any] = field(default_factory=dict)
    hasher: str = "sha256"
    log_level: str = "INFO"


_TOP_LEVEL_KEYS = ("hasher", "log_level")


def _env_override(data: dict, prefix: str = "HENIX") -> dict:
    """Override config values with environment variables.

    Environment variables follow the pattern HENIX_SECTION_KEY.
    For example: HENIX_DEPLOY_BASE_DIR=/srv/henix, HENIX_SSH_USER=deploy.
    Top-level keys use their full name: HENIX_LOG_LEVEL=DEBUG.
    """
    for key, value in os.environ.items():
        if not key.startswith(f"{prefix}_"):
            continue
        name = key[len(prefix) + 1:].lower()
        if name in _TOP_LEVEL_KEYS:
            data[name] = value
            continue
        parts = name.split("_", 1)
        if len(parts) == 2:
            section, field_name = parts
            if section == "nodes" or not isinstance(data.get(section, {}), dict):
                continue
            data.setdefault(section, {})[field_name] = value
    return data


def _parse_config_file(path: Path) -> dict:
    """Parse a JSON config file. Returns empty dict on failure."""
    try:
        with open(path) as f:
            data = json.load(f)
    except FileNotFoundError:
        logger.debug("Config file not found: %s", path)
        return {}
    except json.JSONDecodeError as e:
        logger.warning("Invalid config file %s: %s", path, e)
        return {}
    if not isinstance(data, dict):
        logger.warning("Invalid config file %s: top level must be an object", path)
        return {}
    return data


def _build_sub_config(cls, data: dict, section: str):
    """Build a sub-config dataclass from a dict, ignoring unknown keys.

    Raises:
        ValueError: the section is not an object, or a value cannot be
            converted to the field's type.
    """
    if not isinstance(data, dict):
        raise ValueError(f"`{section}` must be an object, got {type(data).__name__}")
    valid_fields = {f.name for f in dataclasses.fields(cls)}
    filtered = {k: v for k, v in data.items() if k in valid_fields}

    # Convert string values coming from the environment
    for f in dataclasses.fields(cls):
        if f.name in filtered and isinstance(filtered[f.name], str):
            if f.type == "int":
                try:
                    filtered[f.name] = int(filtered[f.name])
                except ValueError:
                    raise ValueError(
                        f"`{section}.{f.name}` must be an integer, got {filtered[f.name]!r}"
                    ) from None
            elif f.type == "bool":
                filtered[f.name] = filtered[f.name].lower() in ("true", "1", "yes")

    return cls(**filtered)


def load_config(
    path: Optional[str] = None,
    env_prefix: str = "HENIX",
) -> HenixConfig:
    """Load configuration from file and environment variables.

    Priority (highest to lowest):
    1. Environment variables (HENIX_SECTION_KEY)
    2. Config file values
    3. Defaults

    Args:
        path: Path to config file (JSON). Defaults to henix.json in CWD.
        env_prefix: Environment variable prefix. Defaults to HENIX.

    Raises:
        ValueError: a setting has the wrong type, e.g. HENIX_DEPLOY_MAX_PARALLEL=lots.
    """
    config_path = Path(path) if path else Path(CONFIG_FILE_NAME)
    data = _parse_config_file(config_path)
    data = _env_override(data, env_prefix)

    nodes = data.get("nodes", {})
    if not isinstance(nodes, dict):
        logger.warning("Ignoring `nodes` in %s: expected an object", config_path)
        nodes = {}

    return HenixConfig(
        deploy=_build_sub_config(DeploySettings, data.get("deploy", {}), "deploy"),
        ssh=_build_sub_config(SSHSettings, data.get("ssh", {}), "ssh"),
        transport=_build_sub_config(TransportSettings, data.get("transport", {}), "transport"),
        telemetry=_build_sub_config(TelemetrySettings, data.get("telemetry", {}), "telemetry"),
        nodes=nodes,
        hasher=data.get("hasher", "sha256"),
        log_level=data.get("log_level", "INFO"),
    )
