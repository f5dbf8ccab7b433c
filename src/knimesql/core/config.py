# src/knimesql/core/config.py
"""
Configuration schema and loading for knimesql.

Uses Pydantic for validation and Dynaconf for multi-source loading.
Settings are frozen (immutable) after construction.
"""

from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator

DEFAULT_INPUT_ALIAS = "input_table"


class TranslationSettings(BaseModel):
    """Inputs to translation that the workflow files cannot provide.

    Example YAML:
        translation:
          default_input_alias: staging_rows
          exposed_columns:
            2: [region, sales]
            5: [region, returns]
    """

    model_config = {"frozen": True, "extra": "forbid"}

    default_input_alias: str = Field(
        default=DEFAULT_INPUT_ALIAS,
        description="Alias used when a unary node has no resolvable predecessor",
    )
    exposed_columns: dict[int, list[str]] = Field(
        default_factory=dict,
        description="Output columns of upstream nodes, keyed by node id",
    )

    @field_validator("default_input_alias")
    @classmethod
    def validate_alias_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("default_input_alias cannot be blank")
        return v


class LoggingSettings(BaseModel):
    """Log output configuration."""

    model_config = {"frozen": True, "extra": "forbid"}

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    json_output: bool = False

    @field_validator("level", mode="before")
    @classmethod
    def normalize_level(cls, v: Any) -> Any:
        return v.upper() if isinstance(v, str) else v


class BundleSettings(BaseModel):
    """Workflow bundle loading."""

    model_config = {"frozen": True, "extra": "forbid"}

    max_workers: int = Field(
        default=4,
        gt=0,
        description="Threads used to read and parse node settings documents",
    )


class KnimeSqlSettings(BaseModel):
    """Top-level settings.

    Every section has defaults, so an empty file is a valid configuration.
    """

    model_config = {"frozen": True, "extra": "forbid"}

    translation: TranslationSettings = Field(default_factory=TranslationSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    bundle: BundleSettings = Field(default_factory=BundleSettings)


def load_settings(config_path: Path) -> KnimeSqlSettings:
    """Load settings from a YAML file with environment variable overrides.

    Precedence:
    1. Environment variables (KNIMESQL_*) - highest priority
    2. Config file
    3. Defaults from the Pydantic schema - lowest priority

    Environment variable format: KNIMESQL_LOGGING__LEVEL for nested keys.

    Raises:
        ValidationError: If configuration fails Pydantic validation
        FileNotFoundError: If config file doesn't exist
    """
    from dynaconf import Dynaconf

    # Dynaconf silently accepts missing files
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    dynaconf_settings = Dynaconf(
        envvar_prefix="KNIMESQL",
        settings_files=[str(config_path)],
        environments=False,
        load_dotenv=False,
        merge_enabled=True,
    )

    # Dynaconf returns uppercase top-level keys; Pydantic wants lowercase
    internal_keys = {"LOAD_DOTENV", "ENVIRONMENTS", "SETTINGS_FILES"}
    raw_config = {k.lower(): v for k, v in dynaconf_settings.as_dict().items() if k not in internal_keys}
    raw_config = _lowercase_section_keys(raw_config)

    return KnimeSqlSettings(**raw_config)


def _lowercase_section_keys(raw_config: dict[str, Any]) -> dict[str, Any]:
    """Lowercase keys one level down, leaving exposed_columns values untouched.

    Environment overrides arrive with uppercase nested keys
    (KNIMESQL_LOGGING__LEVEL -> {"LEVEL": ...}).
    """
    normalized: dict[str, Any] = {}
    for section, body in raw_config.items():
        if isinstance(body, dict):
            normalized[section] = {str(k).lower() if isinstance(k, str) else k: v for k, v in body.items()}
        else:
            normalized[section] = body
    return normalized
