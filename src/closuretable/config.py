import logging
from functools import lru_cache
from typing import Any, Literal, Optional

from pydantic import BaseModel, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfigError(RuntimeError):
    """Configuration-related error."""
    pass


# ─────────────────────────────────────────────────────────────
# Section configs
# ─────────────────────────────────────────────────────────────


class LoggingSettings(BaseModel):
    level: Literal["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"] = "INFO"
    format: str = (
        "%(asctime)-20s %(name)-30s "
        "%(levelname)-8s: %(message)s"
    )


class ClosureTableSettings(BaseModel):
    """
    Layout of the persisted closure table.

    In production, override via:
    - env var:     CLOSURETABLE_TABLE__TABLE_NAME, CLOSURETABLE_TABLE__SCHEMA_NAME, ...
    - dotenv:      .env / .env.local
    """
    table_name: str = Field(
        "closure", description="Name of the closure table."
    )
    schema_name: Optional[str] = Field(
        default=None,
        description="Database schema holding the table (None = default schema).",
    )

    ancestor_column: str = Field(
        "ancestor", description="Column holding the ancestor id."
    )
    descendant_column: str = Field(
        "descendant", description="Column holding the descendant id."
    )
    depth_column: str = Field(
        "depth", description="Column holding the minimum depth."
    )

    id_type: Literal["integer", "bigint", "string"] = Field(
        "integer",
        description="SQL type used for the ancestor/descendant columns.",
    )

    @model_validator(mode="after")
    def _check_columns(self) -> "ClosureTableSettings":
        columns = (self.ancestor_column, self.descendant_column, self.depth_column)
        if len(set(columns)) != len(columns):
            raise ConfigError(
                f"Closure table columns must be distinct, got {columns!r}"
            )
        return self


# ─────────────────────────────────────────────────────────────
# Top-level settings
# ─────────────────────────────────────────────────────────────


class AppSettings(BaseSettings):
    """
    Canonical configuration for closuretable.

    Precedence (highest → lowest):

    1. Init kwargs (tests/overrides)
    2. Environment variables
    3. .env and .env.local
    4. Defaults in this class
    """

    model_config = SettingsConfigDict(
        env_prefix="CLOSURETABLE_",  # CLOSURETABLE_LOGGING__LEVEL, CLOSURETABLE_TABLE__TABLE_NAME, ...
        env_file=(".env", ".env.local"),  # .env.local overrides .env
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
        validate_default=True,
    )

    debug: bool = False

    logging: LoggingSettings = LoggingSettings()
    table: ClosureTableSettings = ClosureTableSettings()  # type: ignore[call-arg]


@lru_cache(maxsize=1)
def get_settings(**overrides: Any) -> AppSettings:
    """
    Cached accessor for process-wide settings.

    `overrides` are init kwargs → highest precedence (handy in tests).
    """
    return AppSettings(**overrides)


def configure_logging(settings: Optional[LoggingSettings] = None) -> None:
    """
    Apply level and format from `settings`.

    Without `settings`, uses get_settings().logging; `debug=True` there
    forces the DEBUG level.
    """
    level = None
    if settings is None:
        app = get_settings()
        settings = app.logging
        if app.debug:
            level = "DEBUG"
    logging.basicConfig(level=level or settings.level, format=settings.format)
