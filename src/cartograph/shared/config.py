# Copyright © 2025 Sierra Labs LLC
# SPDX-License-Identifier: AGPL-3.0-only
# License-Filename: LICENSE

"""
Configuration management for Cartograph.

Values come from the dataclass defaults, then the YAML config file, then
environment variables.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from ..snapshot.models import Target

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path.home() / ".cartograph" / "config.yaml"


def default_targets() -> List[Target]:
    """The internal database of an AtlasNet deployment."""
    host = os.environ.get("INTERNAL_REDIS_SERVICE_NAME") or "localhost"
    port = 6379
    port_text = os.environ.get("INTERNAL_REDIS_PORT", "")
    if port_text.isdigit() and 0 < int(port_text) <= 65535:
        port = int(port_text)
    return [Target(id="internal", name="InternalDB", host=host, port=port)]


@dataclass
class SnapshotConfig:
    """Limits and timeouts for probes and snapshots."""

    max_payload_chars: int = 4096
    max_keys_per_db: int = 5000
    scan_count: int = 500
    probe_connect_timeout: float = 0.5  # seconds
    snapshot_connect_timeout: float = 3.0  # seconds


@dataclass
class Config:
    """Cartograph configuration container."""

    targets: List[Target] = field(default_factory=default_targets)
    snapshot: SnapshotConfig = field(default_factory=SnapshotConfig)

    # Telemetry settings
    telemetry_rows_file: Optional[Path] = None

    # Logging settings
    log_level: str = "INFO"

    # Config file path
    config_path: Optional[Path] = None

    def __post_init__(self):
        """Initialize configuration after creation."""
        if self.config_path is None:
            env_path = os.environ.get("CARTOGRAPH_CONFIG")
            self.config_path = Path(env_path) if env_path else DEFAULT_CONFIG_PATH
        self.config_path = Path(self.config_path).expanduser()

        if self.config_path.exists():
            self.load_from_file()

        self.load_from_env()

    def load_from_file(self):
        """Load configuration from YAML file."""
        try:
            with open(self.config_path) as f:
                data = yaml.safe_load(f) or {}
        except Exception as e:
            logger.warning(f"Could not load config file {self.config_path}: {e}")
            return

        if not isinstance(data, dict):
            logger.warning(f"Ignoring config file {self.config_path}: expected a mapping")
            return

        # Targets
        targets = data.get("targets")
        if isinstance(targets, list):
            parsed = []
            for entry in targets:
                try:
                    parsed.append(Target.from_dict(entry))
                except (TypeError, ValueError, AttributeError) as e:
                    logger.warning(f"Skipping invalid target {entry!r}: {e}")
            self.targets = parsed

        # Snapshot settings
        snapshot = data.get("snapshot", {})
        if isinstance(snapshot, dict):
            try:
                self.snapshot = SnapshotConfig(
                    max_payload_chars=int(snapshot.get("max_payload_chars", self.snapshot.max_payload_chars)),
                    max_keys_per_db=int(snapshot.get("max_keys_per_db", self.snapshot.max_keys_per_db)),
                    scan_count=int(snapshot.get("scan_count", self.snapshot.scan_count)),
                    probe_connect_timeout=float(
                        snapshot.get("probe_connect_timeout", self.snapshot.probe_connect_timeout)
                    ),
                    snapshot_connect_timeout=float(
                        snapshot.get("snapshot_connect_timeout", self.snapshot.snapshot_connect_timeout)
                    ),
                )
            except (TypeError, ValueError) as e:
                logger.warning(f"Ignoring invalid snapshot settings in {self.config_path}: {e}")

        # Telemetry settings
        telemetry = data.get("telemetry", {})
        if isinstance(telemetry, dict) and telemetry.get("rows_file"):
            self.telemetry_rows_file = Path(telemetry["rows_file"]).expanduser()

        # Logging settings
        logging_section = data.get("logging", {})
        if isinstance(logging_section, dict):
            self.log_level = str(logging_section.get("level", self.log_level)).upper()

    def load_from_env(self):
        """Load configuration from environment variables."""
        if env_max_keys := os.environ.get("CARTOGRAPH_MAX_KEYS"):
            if env_max_keys.isdigit():
                self.snapshot.max_keys_per_db = int(env_max_keys)
            else:
                logger.warning(f"Ignoring non-numeric CARTOGRAPH_MAX_KEYS={env_max_keys!r}")

        if env_max_chars := os.environ.get("CARTOGRAPH_MAX_PAYLOAD_CHARS"):
            if env_max_chars.isdigit():
                self.snapshot.max_payload_chars = int(env_max_chars)
            else:
                logger.warning(f"Ignoring non-numeric CARTOGRAPH_MAX_PAYLOAD_CHARS={env_max_chars!r}")

        if env_rows_file := os.environ.get("CARTOGRAPH_TELEMETRY_FILE"):
            self.telemetry_rows_file = Path(env_rows_file).expanduser()

        if env_level := os.environ.get("CARTOGRAPH_LOG_LEVEL"):
            self.log_level = env_level.upper()

    def save_to_file(self):
        """Save current configuration to YAML file."""
        self.config_path.parent.mkdir(parents=True, exist_ok=True)

        data = {
            "targets": [target.to_dict() for target in self.targets],
            "snapshot": {
                "max_payload_chars": self.snapshot.max_payload_chars,
                "max_keys_per_db": self.snapshot.max_keys_per_db,
                "scan_count": self.snapshot.scan_count,
                "probe_connect_timeout": self.snapshot.probe_connect_timeout,
                "snapshot_connect_timeout": self.snapshot.snapshot_connect_timeout,
            },
            "telemetry": {
                "rows_file": str(self.telemetry_rows_file) if self.telemetry_rows_file else None,
            },
            "logging": {
                "level": self.log_level,
            },
        }

        with open(self.config_path, "w") as f:
            yaml.dump(data, f, default_flow_style=False, sort_keys=False)

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value by dot-notation key (e.g. ``snapshot.scan_count``)."""
        value: Any = self
        for part in key.split("."):
            if isinstance(value, dict):
                value = value.get(part)
            else:
                value = getattr(value, part, None)

            if value is None:
                return default

        return value

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return {
            "targets": [target.to_dict() for target in self.targets],
            "snapshot": dict(self.snapshot.__dict__),
            "telemetry_rows_file": str(self.telemetry_rows_file) if self.telemetry_rows_file else None,
            "log_level": self.log_level,
        }

    def validate(self) -> bool:
        """Validate configuration values."""
        errors = []

        if not self.targets:
            errors.append("at least one target must be configured")

        target_ids = [target.id for target in self.targets]
        if len(set(target_ids)) != len(target_ids):
            errors.append("target ids must be unique")

        if self.snapshot.max_payload_chars <= 0:
            errors.append("snapshot.max_payload_chars must be positive")

        if self.snapshot.max_keys_per_db <= 0:
            errors.append("snapshot.max_keys_per_db must be positive")

        if self.snapshot.scan_count <= 0:
            errors.append("snapshot.scan_count must be positive")

        if self.snapshot.probe_connect_timeout <= 0:
            errors.append("snapshot.probe_connect_timeout must be positive")

        if self.snapshot.probe_connect_timeout >= self.snapshot.snapshot_connect_timeout:
            errors.append("snapshot.probe_connect_timeout must be shorter than snapshot_connect_timeout")

        if self.log_level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            errors.append(f"unknown logging.level '{self.log_level}'")

        if errors:
            for error in errors:
                logger.error(f"Configuration error: {error}")
            return False

        return True
