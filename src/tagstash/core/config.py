# src/tagstash/core/config.py
"""
Configuration schema and loading for tagstash.

Uses Pydantic for validation and Dynaconf for multi-source loading.
Settings are frozen (immutable) after construction.
"""

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from tagstash.core.templates import TemplateTagMatcher

DEFAULT_PLACEHOLDER = "TAGSTASH_PLACEHOLDER"
DEFAULT_STORE_PATH = Path(".tagstash.json")


class TemplateSettings(BaseModel):
    """Delimiters recognised as template tags.

    The defaults match both Jinja2 and Go/Helm templates.

    Example YAML:
        template:
          variable_start: "[["
          variable_end: "]]"
    """

    model_config = {"frozen": True, "extra": "forbid"}

    variable_start: str = Field(default="{{", min_length=1)
    variable_end: str = Field(default="}}", min_length=1)
    block_start: str = Field(default="{%", min_length=1)
    block_end: str = Field(default="%}", min_length=1)
    comment_start: str = Field(default="{#", min_length=1)
    comment_end: str = Field(default="#}", min_length=1)

    @model_validator(mode="after")
    def validate_distinct_start_delimiters(self) -> "TemplateSettings":
        """The three opening delimiters must differ or the lexer is ambiguous."""
        starts = [self.variable_start, self.block_start, self.comment_start]
        if len(set(starts)) != len(starts):
            raise ValueError(f"variable_start, block_start and comment_start must be distinct, got {starts}")
        return self


class NamingSettings(BaseModel):
    """Name transformations the composer applies to every object.

    Mirrors kustomize's namePrefix, nameSuffix and namespace so identifiers
    computed before composition match the ones computed after it.
    """

    model_config = {"frozen": True, "extra": "forbid"}

    name_prefix: str = ""
    name_suffix: str = ""
    namespace: str | None = None

    @property
    def is_identity(self) -> bool:
        return not (self.name_prefix or self.name_suffix or self.namespace)


class TagStashSettings(BaseModel):
    """Top-level tagstash settings.

    Example YAML:
        placeholder: STASHED_TEMPLATE_VALUE
        store_path: build/.tagstash.json
        naming:
          name_prefix: dev-
          namespace: team-a
    """

    model_config = {"frozen": True, "extra": "forbid"}

    placeholder: str = Field(
        default=DEFAULT_PLACEHOLDER,
        min_length=1,
        description="Scalar text written in place of every stashed template tag",
    )
    template: TemplateSettings = Field(default_factory=TemplateSettings)
    naming: NamingSettings = Field(default_factory=NamingSettings)
    store_path: Path = Field(
        default=DEFAULT_STORE_PATH,
        description="Where `tagstash stash` persists the stash store",
    )

    @field_validator("placeholder")
    @classmethod
    def validate_placeholder_is_plain_scalar(cls, v: str) -> str:
        """The placeholder must read back as itself: a plain, single-line string."""
        if "\n" in v or v != v.strip():
            raise ValueError("placeholder must be a single line without surrounding whitespace")
        try:
            loaded = yaml.safe_load(v)
        except yaml.YAMLError as e:
            raise ValueError(f"placeholder is not valid YAML: {e}") from e
        if loaded != v:
            raise ValueError(f"placeholder must load as the plain string {v!r}, got {loaded!r}")
        return v

    @model_validator(mode="after")
    def validate_placeholder_is_not_template(self) -> "TagStashSettings":
        """A placeholder that looks like a template tag would be stashed again."""
        if TemplateTagMatcher.from_settings(self.template)(self.placeholder):
            raise ValueError(f"placeholder {self.placeholder!r} contains a template tag delimiter")
        return self


def _lower_keys(data: Any) -> Any:
    if isinstance(data, dict):
        return {str(k).lower(): _lower_keys(v) for k, v in data.items()}
    return data


def load_settings(config_path: Path) -> TagStashSettings:
    """Load settings from YAML file with environment variable overrides.

    Uses Dynaconf for multi-source loading with precedence:
    1. Environment variables (TAGSTASH_*) - highest priority
    2. Config file
    3. Defaults from Pydantic schema - lowest priority

    Environment variable format: TAGSTASH_NAMING__NAMESPACE for nested keys.

    Args:
        config_path: Path to YAML configuration file

    Returns:
        Validated TagStashSettings instance

    Raises:
        ValidationError: If configuration fails Pydantic validation
        FileNotFoundError: If config file doesn't exist
    """
    from dynaconf import Dynaconf

    # Dynaconf silently accepts missing files
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    dynaconf_settings = Dynaconf(
        envvar_prefix="TAGSTASH",
        settings_files=[str(config_path)],
        environments=False,
        load_dotenv=False,
        merge_enabled=True,
    )

    # Dynaconf returns uppercase keys; also drop its internal settings
    internal_keys = {"LOAD_DOTENV", "ENVIRONMENTS", "SETTINGS_FILES"}
    raw_config = {k: v for k, v in dynaconf_settings.as_dict().items() if k not in internal_keys}

    return TagStashSettings(**_lower_keys(raw_config))


def load_kustomize_naming(kustomization_path: Path) -> NamingSettings:
    """Read namePrefix, nameSuffix and namespace from a kustomization file.

    Args:
        kustomization_path: Path to kustomization.yaml

    Returns:
        NamingSettings with the fields the kustomization declares

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If the file is not a YAML mapping
    """
    loaded = yaml.safe_load(kustomization_path.read_text(encoding="utf-8"))
    if loaded is None:
        return NamingSettings()
    if not isinstance(loaded, dict):
        raise ValueError(f"{kustomization_path} must contain a mapping, got {type(loaded).__name__}")
    return NamingSettings(
        name_prefix=str(loaded.get("namePrefix") or ""),
        name_suffix=str(loaded.get("nameSuffix") or ""),
        namespace=str(loaded["namespace"]) if loaded.get("namespace") else None,
    )
