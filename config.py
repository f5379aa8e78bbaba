"""Runtime settings read from ``MINITABLE_*`` environment variables."""

from __future__ import annotations

import os
from functools import lru_cache
from typing import Any, ClassVar, Dict, Literal, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

QUOTE = '"'


def check_delimiter(value: str) -> str:
    if len(value) != 1 or value == QUOTE:
        raise ValueError("delimiter must be a single character other than '\"'")
    return value


def check_column_width(value: int) -> int:
    if value < 1:
        raise ValueError("column width must be at least 1")
    return value


class Settings(BaseModel):
    """Loader and display defaults. The CLI flags override these per run."""

    ENV_PREFIX: ClassVar[str] = "MINITABLE_"

    model_config = ConfigDict(extra="ignore", frozen=True)

    delimiter: str = Field(default=",", description="Field separator used by the loader.")
    encoding: str = Field(default="utf-8", description="Text encoding of input files.")
    column_width: int = Field(default=20, description="Cell width of the fixed-width rendering.")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "WARNING"
    log_format: Literal["text", "json"] = "text"

    @field_validator("delimiter")
    @classmethod
    def _single_character(cls, value: str) -> str:
        return check_delimiter(value)

    @field_validator("column_width")
    @classmethod
    def _positive_width(cls, value: int) -> int:
        return check_column_width(value)

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_level(cls, value: Any) -> Any:
        return value.upper() if isinstance(value, str) else value

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        environ = os.environ if environ is None else environ
        values: Dict[str, Any] = {}
        for name in cls.model_fields:
            key = f"{cls.ENV_PREFIX}{name.upper()}"
            if key in environ:
                values[name] = environ[key]
        return cls(**values)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings.from_env()


def reset_settings_cache() -> None:
    get_settings.cache_clear()


__all__ = ["Settings", "check_column_width", "check_delimiter", "get_settings", "reset_settings_cache"]
