"""Runtime configuration read from environment variables."""

import os
from datetime import timedelta
from pathlib import Path

from pydantic import BaseModel, Field, field_validator

from .cache import DEFAULT_TTL


class MaintainerConfig(BaseModel):
    """Settings shared by the CLI commands.

    Every field can be set through the environment (or a .env file loaded by
    the CLI); command-line flags override them.
    """

    github_token: str | None = Field(None, description="GITHUB_TOKEN")
    cache_ttl_seconds: int = Field(
        int(DEFAULT_TTL.total_seconds()),
        gt=0,
        description="ACTIONS_MAINTAINER_CACHE_TTL",
    )
    rules_file: Path | None = Field(None, description="ACTIONS_MAINTAINER_RULES_FILE")
    cache_file: Path | None = Field(None, description="ACTIONS_MAINTAINER_CACHE_FILE")

    @field_validator("rules_file", "cache_file", mode="before")
    @classmethod
    def _empty_path_is_none(cls, value: str | Path | None) -> str | Path | None:
        return value or None

    @property
    def cache_ttl(self) -> timedelta:
        return timedelta(seconds=self.cache_ttl_seconds)

    @classmethod
    def from_env(cls, **overrides: object) -> "MaintainerConfig":
        """Build the configuration from the environment.

        Args:
            **overrides: Values taking precedence over the environment; None
                values are ignored

        Raises:
            pydantic.ValidationError: If a value is invalid (e.g. a
                non-numeric cache TTL)
        """
        values: dict[str, object] = {
            "github_token": os.getenv("GITHUB_TOKEN"),
            "rules_file": os.getenv("ACTIONS_MAINTAINER_RULES_FILE"),
            "cache_file": os.getenv("ACTIONS_MAINTAINER_CACHE_FILE"),
        }
        ttl = os.getenv("ACTIONS_MAINTAINER_CACHE_TTL")
        if ttl:
            values["cache_ttl_seconds"] = ttl

        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls.model_validate(values)
