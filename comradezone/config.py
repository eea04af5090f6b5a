"""Configuration management for the ComradeZone core."""

import os
from pathlib import Path

import yaml
from pydantic import BaseModel, Field


class DatabaseConfig(BaseModel):
    """Database settings."""

    path: str = Field(
        default="~/.comradezone/comradezone.db", description="Path to SQLite database file"
    )


class ModerationConfig(BaseModel):
    """Length limits applied before classification."""

    max_chat_length: int = Field(default=500, ge=1)
    min_confession_length: int = Field(default=10, ge=1)
    max_confession_length: int = Field(default=2000, ge=1)
    min_crush_title_length: int = Field(default=3, ge=1)
    min_crush_description_length: int = Field(default=10, ge=1)


class RateLimitConfig(BaseModel):
    """Anonymous campus chat throttling."""

    anonymous_message_limit: int = Field(default=10, ge=1)
    window_hours: int = Field(default=24, ge=1, description="Rolling window length")
    prune_after_days: int = Field(
        default=7, ge=1, description="Records idle longer than this are removed by `prune`"
    )


class Config(BaseModel):
    """Root configuration model."""

    database: DatabaseConfig = DatabaseConfig()
    moderation: ModerationConfig = ModerationConfig()
    rate_limit: RateLimitConfig = RateLimitConfig()


def load_config(config_path: str | Path = "config.yaml") -> Config:
    """Load and validate configuration from YAML file.

    Supports ${VAR_NAME} syntax for environment variable expansion.

    Args:
        config_path: Path to the configuration file.

    Returns:
        Validated Config object.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        ValidationError: If config is invalid.
        ValueError: If referenced environment variable is not set.
    """
    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(
            f"Config file not found: {path}\n"
            "Copy config.example.yaml to config.yaml and adjust it."
        )

    with path.open() as f:
        raw_config = yaml.safe_load(f) or {}

    def expand_env_vars(obj):
        if isinstance(obj, dict):
            return {k: expand_env_vars(v) for k, v in obj.items()}
        elif isinstance(obj, list):
            return [expand_env_vars(item) for item in obj]
        elif isinstance(obj, str) and obj.startswith("${") and obj.endswith("}"):
            env_var = obj[2:-1]
            value = os.getenv(env_var)
            if value is None:
                raise ValueError(f"Environment variable '{env_var}' is not set")
            return value
        return obj

    raw_config = expand_env_vars(raw_config)

    return Config(**raw_config)
