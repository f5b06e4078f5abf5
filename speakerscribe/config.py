"""
speakerscribe.config - YAML config loading, tier merging, validation.

Handles loading speakerscribe.yaml from the working directory, applying
deployment-tier defaults, environment overrides, and validating all
parameters.
"""

from __future__ import annotations

import os
import secrets
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from speakerscribe.exceptions import ConfigError

CONFIG_FILENAME = "speakerscribe.yaml"

ACCEPTED_MIME_TYPES = ("audio/mp4", "audio/m4a", "audio/x-m4a")
ACCEPTED_EXTENSION = "m4a"


class ScribeConfig(BaseModel):
    """Resolved configuration for a Speakerscribe deployment."""

    deployment_tier: str = "pro"
    max_file_size_mb: int = Field(default=500, gt=0)

    transport: str = "staged"
    server_url: str = "http://127.0.0.1:8000"
    request_timeout: float = Field(default=300.0, gt=0.0)

    llm_model: str = "gemini/gemini-2.5-flash"
    api_key: str | None = None
    mock_mode: bool = False

    host: str = "127.0.0.1"
    port: int = Field(default=8000, gt=0, le=65535)
    public_url: str | None = None

    storage_dir: Path = Path(".speakerscribe/blobs")
    # Upload tokens only need to outlive one server process
    storage_secret: str = Field(default_factory=lambda: secrets.token_urlsafe(32))

    config_path: Path | None = None

    @field_validator("deployment_tier")
    @classmethod
    def validate_tier(cls, v: str) -> str:
        valid = set(DEPLOYMENT_TIERS)
        if v not in valid:
            raise ValueError(f"deployment_tier must be one of: {valid}")
        return v

    @field_validator("transport")
    @classmethod
    def validate_transport(cls, v: str) -> str:
        valid = {"inline", "staged"}
        if v not in valid:
            raise ValueError(f"transport must be one of: {valid}")
        return v

    @property
    def max_file_size_bytes(self) -> int:
        return self.max_file_size_mb * 1024 * 1024

    @property
    def base_url(self) -> str:
        """URL the proxy advertises in blob locators."""
        if self.public_url:
            return self.public_url.rstrip("/")
        return f"http://{self.host}:{self.port}"


DEPLOYMENT_TIERS: dict[str, dict[str, Any]] = {
    "hobby": {
        "max_file_size_mb": 25,
        "transport": "inline",
        "request_timeout": 60.0,
    },
    "pro": {
        "max_file_size_mb": 500,
        "transport": "staged",
        "request_timeout": 300.0,
    },
}

ENV_OVERRIDES: dict[str, tuple[str, ...]] = {
    "api_key": ("API_KEY", "GEMINI_API_KEY"),
    "storage_secret": ("SPEAKERSCRIBE_STORAGE_SECRET",),
    "server_url": ("SPEAKERSCRIBE_SERVER_URL",),
    "public_url": ("SPEAKERSCRIBE_PUBLIC_URL",),
}


def load_tier(name: str) -> dict[str, Any]:
    """Return the defaults for a deployment tier."""
    if name in DEPLOYMENT_TIERS:
        return DEPLOYMENT_TIERS[name].copy()
    raise ConfigError(f"Unknown deployment tier: {name}")


def merge_config(file_config: dict[str, Any], tier: dict[str, Any]) -> dict[str, Any]:
    """Merge file config with tier defaults. File config takes precedence."""
    merged = tier.copy()
    for key, value in file_config.items():
        if value is not None:
            merged[key] = value
    return merged


def apply_env_overrides(
    config: dict[str, Any], environ: dict[str, str] | None = None
) -> dict[str, Any]:
    """Fill secrets and URLs from environment variables when set."""
    env = os.environ if environ is None else environ
    result = config.copy()
    for key, names in ENV_OVERRIDES.items():
        for name in names:
            value = env.get(name)
            if value:
                result[key] = value
                break
    return result


def load_config(
    config_dir: Path | None = None,
    environ: dict[str, str] | None = None,
    **overrides: Any,
) -> ScribeConfig:
    """Load and validate configuration.

    Reads ``speakerscribe.yaml`` from ``config_dir`` (default: cwd) when
    present, applies tier defaults, environment variables, then any explicit
    keyword overrides (CLI options).

    Raises:
        ConfigError: If the file or any value is invalid
    """
    config_dir = config_dir or Path.cwd()
    config_file = config_dir / CONFIG_FILENAME

    raw_config: dict[str, Any] = {}
    if config_file.exists():
        try:
            with open(config_file) as f:
                raw_config = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {config_file}: {e}") from e
        if not isinstance(raw_config, dict):
            raise ConfigError(f"{config_file} must contain a mapping")
        raw_config["config_path"] = config_file

    tier_name = overrides.get("deployment_tier") or raw_config.get("deployment_tier", "pro")
    merged = merge_config(raw_config, load_tier(tier_name))
    merged = apply_env_overrides(merged, environ)
    merged = merge_config(overrides, merged)

    try:
        return ScribeConfig(**merged)
    except ValidationError as e:
        raise ConfigError(str(e)) from e


def write_config(config: dict[str, Any], path: Path) -> None:
    """Write configuration to a YAML file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        yaml.dump(config, f, default_flow_style=False, sort_keys=False)
