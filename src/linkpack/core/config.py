"""Configuration loader for linkpack.

This module loads and validates the YAML file that describes a default
batch run: batch options, privacy mode, output type, archive name and QR
appearance. Nothing here is persisted; the caller passes the result into
each invocation.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, TypeVar

import yaml

from linkpack.core.constants import DEFAULTS, DedupeMode, OutputType, PrivacyMode
from linkpack.core.exceptions import ConfigError
from linkpack.core.models import BatchOptions, QRRenderOptions


E = TypeVar("E", bound=Enum)


@dataclass
class AppConfig:
    """Everything one run needs besides the input text."""
    options: BatchOptions = field(default_factory=BatchOptions)
    privacy_mode: PrivacyMode = DEFAULTS["privacy_mode"]
    output_type: OutputType = DEFAULTS["output_type"]
    archive_name: str = DEFAULTS["archive_name"]


# ============================================================================
# Value Helpers
# ============================================================================

def _parse_enum(enum_cls: type[E], value: Any, setting: str) -> E:
    """Look up an enum member by value, case-insensitively.

    Raises:
        ConfigError: If the value is not one of the enum's values
    """
    if isinstance(value, enum_cls):
        return value
    if isinstance(value, str):
        for member in enum_cls:
            if member.value.lower() == value.strip().lower():
                return member
    allowed = ", ".join(m.value for m in enum_cls)
    raise ConfigError(f"Invalid value for '{setting}': {value!r}. Must be one of: {allowed}")


def _parse_bool(value: Any, setting: str) -> bool:
    if isinstance(value, bool):
        return value
    raise ConfigError(f"'{setting}' must be true or false, got {value!r}")


def _section(data: dict[str, Any], name: str) -> dict[str, Any]:
    section = data.get(name) or {}
    if not isinstance(section, dict):
        raise ConfigError(f"'{name}' section must be a mapping")
    return section


# ============================================================================
# Batch Options Loader
# ============================================================================

def parse_batch_options(batch: dict[str, Any], qr: dict[str, Any] | None = None) -> BatchOptions:
    """Build BatchOptions from the snake_case 'batch' section of a config file.

    Args:
        batch: Mapping from the 'batch' section
        qr: Mapping from the 'qr' section, if any

    Returns:
        BatchOptions with defaults for every missing key

    Raises:
        ConfigError: If a value has the wrong type or an unknown enum value
    """
    options = BatchOptions()

    for key in ("dedupe", "export_csv", "export_json", "qr_png", "qr_svg"):
        if key in batch:
            setattr(options, key, _parse_bool(batch[key], f"batch.{key}"))

    if "dedupe_mode" in batch:
        options.dedupe_mode = _parse_enum(DedupeMode, batch["dedupe_mode"], "batch.dedupe_mode")

    if "export_fields" in batch and batch["export_fields"] is not None:
        fields = batch["export_fields"]
        if isinstance(fields, str):
            fields = [f.strip() for f in fields.split(",") if f.strip()]
        if not isinstance(fields, list) or not all(isinstance(f, str) for f in fields):
            raise ConfigError("'batch.export_fields' must be a list of field names")
        options.export_fields = fields

    if qr:
        options.qr_render = QRRenderOptions.from_dict(qr)

    return options


# ============================================================================
# Config File Loader
# ============================================================================

def load_config(config_file: Path | str | None = None) -> AppConfig:
    """Load run configuration from a YAML file.

    Args:
        config_file: Path to the YAML file. If None, returns defaults

    Returns:
        AppConfig with validated settings

    Raises:
        ConfigError: If the file is missing, unparsable or invalid
    """
    if config_file is None:
        return AppConfig()

    config_path = Path(config_file)

    if not config_path.exists():
        raise ConfigError(f"Config file not found: {config_path}")

    try:
        with config_path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Failed to parse config YAML: {e}") from e
    except OSError as e:
        raise ConfigError(f"Failed to read config file: {e}") from e

    if data is None:
        return AppConfig()

    if not isinstance(data, dict):
        raise ConfigError("Config file must contain a mapping at the top level")

    options = parse_batch_options(_section(data, "batch"), _section(data, "qr"))

    config = AppConfig(options=options)

    if "privacy_mode" in data:
        config.privacy_mode = _parse_enum(PrivacyMode, data["privacy_mode"], "privacy_mode")
    if "output_type" in data:
        config.output_type = _parse_enum(OutputType, data["output_type"], "output_type")
    if "archive_name" in data:
        name = data["archive_name"]
        if not isinstance(name, str) or not name.strip():
            raise ConfigError("'archive_name' must be a non-empty string")
        config.archive_name = name.strip()

    return config
