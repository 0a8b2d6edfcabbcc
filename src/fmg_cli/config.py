"""Configuration loading for the FortiManager CLI."""

from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

from fmg_cli.transport import DEFAULT_NAMESPACE


class Settings(BaseSettings):
    """Connection settings loaded from environment variables or .env files."""

    model_config = SettingsConfigDict(
        env_prefix="FMG_CLI_",
        extra="ignore",
    )

    host: str | None = None
    username: str | None = None
    password: str | None = None
    port: int = 8080
    verify_ssl: bool = True
    namespace: str = DEFAULT_NAMESPACE
    timeout: float = 30

    @classmethod
    def from_env_file(cls, env_file: Path | None = None) -> Settings:
        kwargs: dict[str, Path] = {}
        if env_file is not None:
            kwargs["_env_file"] = env_file
        return cls(**kwargs)
