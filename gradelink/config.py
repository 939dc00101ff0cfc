"""
Gradelink outcome service configuration.

Settings are read from a JSON, YAML or TOML file and then overridden by
``GRADELINK_*`` environment variables. Validation is done by pydantic.

Copyright (c) 2025 Chronos Algorithmic Observatory
Licensed under MIT License
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Final, List, Mapping, Optional, Union

import toml
import yaml
from pydantic import Field, SecretStr, field_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic.dataclasses import dataclass as pydantic_dataclass

from gradelink.integration.errors import LTIConfigurationError
from gradelink.integration.extensions.capabilities import (
    OUTCOME_DATA_TYPES,
    decode_outcome_types,
)


ENV_PREFIX: Final[str] = "GRADELINK_"
DEFAULT_TIMEOUT_SECONDS: Final[float] = 10.0
DEFAULT_USER_AGENT: Final[str] = "gradelink/1.0"
LOG_FORMAT: Final[str] = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


@pydantic_dataclass(frozen=True)
class OutcomeServiceSettings:
    """
    Immutable outcome service settings.

    Invariants:
    - Consumer key is non-empty
    - Timeout is strictly positive
    - Accepted outcome data values keep the order they were given in
    """

    consumer_key: str = Field(..., min_length=1, description="OAuth consumer key shared with the platform")
    consumer_secret: SecretStr = Field(..., description="OAuth consumer secret")
    timeout_seconds: float = Field(DEFAULT_TIMEOUT_SECONDS, gt=0, description="HTTP timeout for outcome posts")
    verify_tls: bool = Field(True, description="Verify the outcome service certificate")
    user_agent: str = Field(DEFAULT_USER_AGENT, min_length=1)
    log_level: str = Field("INFO", description="Level applied by configure_logging")
    outcome_data_values_accepted: List[str] = Field(
        default_factory=lambda: list(OUTCOME_DATA_TYPES),
        description="Outcome data types advertised by a consumer"
    )

    @field_validator("outcome_data_values_accepted", mode="before")
    @classmethod
    def split_outcome_data_values(cls, v: Any) -> Any:
        """Accept the comma-joined wire form as well as a list."""
        if isinstance(v, str):
            return decode_outcome_types(v)
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {v}")
        return level


def _load_config_file(config_path: Path) -> Dict[str, Any]:
    """Load configuration file with format auto-detection."""
    if not config_path.exists():
        raise LTIConfigurationError(
            f"Configuration file not found: {config_path}",
            {"path": str(config_path)}
        )

    content = config_path.read_text(encoding='utf-8')
    suffix = config_path.suffix.lower()

    try:
        if suffix == '.json':
            return json.loads(content)
        elif suffix in ['.yml', '.yaml']:
            return yaml.safe_load(content) or {}
        elif suffix == '.toml':
            return toml.loads(content)
    except (json.JSONDecodeError, yaml.YAMLError, toml.TomlDecodeError) as e:
        raise LTIConfigurationError(
            f"Invalid configuration file {config_path}: {e}",
            {"path": str(config_path)}
        ) from e

    # Unknown suffix: try each format in turn
    try:
        return json.loads(content)
    except json.JSONDecodeError:
        pass
    try:
        return toml.loads(content)
    except toml.TomlDecodeError:
        pass
    try:
        loaded = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise LTIConfigurationError(
            f"Unsupported configuration format: {config_path}",
            {"path": str(config_path)}
        ) from e
    if not isinstance(loaded, dict):
        raise LTIConfigurationError(
            f"Unsupported configuration format: {config_path}",
            {"path": str(config_path)}
        )
    return loaded


def _environment_overrides(environ: Mapping[str, str]) -> Dict[str, Any]:
    overrides: Dict[str, Any] = {}
    for name in OutcomeServiceSettings.__dataclass_fields__:
        env_name = f"{ENV_PREFIX}{name.upper()}"
        if env_name in environ:
            overrides[name] = environ[env_name]
    return overrides


def load_settings(
    path: Optional[Union[str, Path]] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> OutcomeServiceSettings:
    """
    Load outcome service settings.

    Args:
        path: Optional JSON, YAML or TOML file; a top-level ``gradelink``
            table is used when present
        environ: Environment mapping, defaults to ``os.environ``

    Returns:
        Validated settings

    Raises:
        LTIConfigurationError: If the file cannot be read or values are invalid
    """
    data: Dict[str, Any] = {}
    if path is not None:
        loaded = _load_config_file(Path(path))
        if not isinstance(loaded, dict):
            raise LTIConfigurationError(
                f"Configuration file must hold a mapping: {path}",
                {"path": str(path)}
            )
        section = loaded.get("gradelink", loaded)
        if not isinstance(section, dict):
            raise LTIConfigurationError(
                f"Configuration section \"gradelink\" must be a mapping: {path}",
                {"path": str(path)}
            )
        data.update(section)

    data.update(_environment_overrides(os.environ if environ is None else environ))

    try:
        return OutcomeServiceSettings(**data)
    except (PydanticValidationError, TypeError) as e:
        raise LTIConfigurationError(f"Invalid outcome service settings: {e}") from e


def configure_logging(settings: Optional[OutcomeServiceSettings] = None) -> None:
    """Apply the configured log level to the ``gradelink`` logger hierarchy."""
    level = settings.log_level if settings is not None else "INFO"
    logging.basicConfig(level=logging.INFO, format=LOG_FORMAT)
    logging.getLogger("gradelink").setLevel(level)


__all__ = [
    "OutcomeServiceSettings",
    "load_settings",
    "configure_logging",
    "ENV_PREFIX",
]
