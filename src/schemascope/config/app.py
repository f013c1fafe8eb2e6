"""Application configuration loading and validation.

Loads YAML configuration for the schemascope server and CLI. Every section
has defaults, so running without a config file works; secrets default from
the environment (``.env`` is loaded by the entry points).
"""
from __future__ import annotations
import os
import yaml
from pathlib import Path
from typing import Literal
from pydantic import BaseModel, Field, field_validator

DEFAULT_CONFIG_PATH = Path("config/schemascope.yaml")


class SourcesConfig(BaseModel):
    """Schema source files configuration."""
    directory: str = Field("database", description="Folder containing schema files")
    extension: str = Field(".sql", description="Schema file suffix")
    max_file_bytes: int = Field(
        5 * 1024 * 1024, ge=1024, le=100 * 1024 * 1024,
        description="Largest schema file that will be parsed"
    )

    @field_validator("extension")
    @classmethod
    def validate_extension(cls, v: str) -> str:
        """Ensure the extension starts with a dot."""
        if not v:
            raise ValueError("extension cannot be empty")
        return v if v.startswith(".") else f".{v}"


class ServerConfig(BaseModel):
    """HTTP server configuration."""
    host: str = Field("127.0.0.1", description="Bind address")
    port: int = Field(8000, ge=1, le=65535, description="Bind port")
    cors_origins: list[str] = Field(default_factory=lambda: ["*"], description="Allowed CORS origins")


class ChatConfig(BaseModel):
    """Chat provider configuration (Anthropic-style messages API)."""
    provider: Literal["anthropic"] = Field("anthropic", description="Chat provider")
    base_url: str = Field("https://api.anthropic.com", description="Provider API URL")
    api_key: str = Field(
        default_factory=lambda: (
            os.getenv("CHAT_API_KEY") or os.getenv("ANTHROPIC_API_KEY") or os.getenv("CLAUDE_API_KEY", "")
        ),
        description="Provider API key"
    )
    model: str = Field(
        default_factory=lambda: os.getenv("CHAT_MODEL", "claude-sonnet-4-5"),
        description="Model name"
    )
    api_version: str = Field("2023-06-01", description="Provider API version header")
    max_tokens: int = Field(2048, ge=1, le=64000, description="Max tokens per reply")
    timeout: float = Field(120.0, gt=0, description="Request timeout (seconds)")

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        """Validate URL scheme."""
        if not v.startswith(("http://", "https://")):
            raise ValueError("base_url must start with 'http://' or 'https://'")
        return v.rstrip("/")


class LoggingConfig(BaseModel):
    """Logging configuration."""
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field("INFO", description="Log level")
    format: str = Field(
        "%(asctime)s %(levelname)s %(name)s: %(message)s",
        description="logging.Formatter format string"
    )


class AppConfig(BaseModel):
    """Complete application configuration."""
    sources: SourcesConfig = Field(default_factory=SourcesConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    chat: ChatConfig = Field(default_factory=ChatConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def from_yaml(cls, path: str | Path) -> AppConfig:
        """Load configuration from YAML file.

        Args:
            path: Path to YAML configuration file

        Returns:
            Validated AppConfig instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If configuration is invalid
        """
        config_path = Path(path)

        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")

        with open(config_path, 'r') as f:
            data = yaml.safe_load(f)

        if not data:
            raise ValueError(f"Empty configuration file: {config_path}")

        try:
            return cls.model_validate(data)
        except Exception as e:
            raise ValueError(f"Invalid configuration in {config_path}: {e}") from e

    @classmethod
    def from_env(cls, env_var: str = "SCHEMASCOPE_CONFIG") -> AppConfig:
        """Load configuration from the path in an environment variable.

        Falls back to ``config/schemascope.yaml`` and then to defaults.
        """
        config_path = os.getenv(env_var)
        if config_path:
            return cls.from_yaml(config_path)

        if DEFAULT_CONFIG_PATH.exists():
            return cls.from_yaml(DEFAULT_CONFIG_PATH)

        sources = SourcesConfig()
        if os.getenv("SCHEMASCOPE_DATABASE_DIR"):
            sources = SourcesConfig(directory=os.environ["SCHEMASCOPE_DATABASE_DIR"])
        return cls(sources=sources)

    def log_redacted(self) -> dict:
        """Get configuration dict with secrets redacted for logging."""
        config_dict = self.model_dump()
        if config_dict["chat"].get("api_key"):
            config_dict["chat"]["api_key"] = "***"
        return config_dict


def load_app_config(config_path: str | Path | None = None) -> AppConfig:
    """Load application configuration from file or environment.

    Args:
        config_path: Optional explicit path to config file

    Returns:
        Validated AppConfig instance

    Raises:
        FileNotFoundError: If an explicit or env-named file is missing
        ValueError: If configuration is invalid
    """
    if config_path:
        return AppConfig.from_yaml(config_path)

    return AppConfig.from_env()
