"""Interpreter settings."""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class InterpreterSettings(BaseSettings):
    """Session and REPL settings, read from `MINIML_*` environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="MINIML_",
        case_sensitive=False,
        extra="ignore",
    )

    log_level: str = Field(default="WARNING")
    typecheck: bool = Field(default=True)
    prelude: bool = Field(default=True)
    recursion_limit: int = Field(default=20000, ge=1000)
    prompt: str = Field(default="> ")


def load_settings(**overrides) -> InterpreterSettings:
    settings = InterpreterSettings()
    overrides = {k: v for k, v in overrides.items() if v is not None}
    if overrides:
        settings = settings.model_copy(update=overrides)
    return settings
