"""Configuration settings for trace-opener."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict, SettingsError

from trace_opener.core.exceptions import InvalidSettings
from trace_opener.core.models import BuildFlavor, MatchStrategy, SearchConfig


class Settings(BaseSettings):
    """Settings loaded from TRACE_OPENER_* environment variables or .env."""

    model_config = SettingsConfigDict(
        env_prefix="TRACE_OPENER_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Search
    build_flavor: BuildFlavor = BuildFlavor.DEBUG
    max_results: int = Field(default=2000, gt=0)
    match_strategy: MatchStrategy = MatchStrategy.BOTH
    extra_patterns: list[str] = Field(default_factory=list)  # JSON list in env

    # Logging
    log_level: str = "WARNING"
    log_json_format: bool = False

    def to_search_config(
        self,
        build_flavor: BuildFlavor | None = None,
        max_results: int | None = None,
        match_strategy: MatchStrategy | None = None,
        extra_patterns: list[str] | None = None,
    ) -> SearchConfig:
        """Build a SearchConfig, letting explicit (CLI) values win over settings."""
        return SearchConfig(
            build_flavor=build_flavor or self.build_flavor,
            max_results=max_results or self.max_results,
            match_strategy=match_strategy or self.match_strategy,
            extra_patterns=tuple(extra_patterns if extra_patterns else self.extra_patterns),
        )


def describe_validation_error(error: ValidationError) -> str:
    """Summarize a validation error as "field: reason" pairs.

    Example:
        "max_results: Input should be greater than 0"
    """
    return "; ".join(
        f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}" for err in error.errors()
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Raises:
        InvalidSettings: A configured value failed validation. Failures are
            not cached, so a corrected environment is picked up on retry.
    """
    try:
        return Settings()
    except ValidationError as e:
        raise InvalidSettings(describe_validation_error(e)) from e
    except SettingsError as e:
        raise InvalidSettings(str(e)) from e
