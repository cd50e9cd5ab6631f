"""
Configuration settings for SLURM Query.

Uses Pydantic Settings to load environment variables for the snapshot source,
the execution sandbox, the HTTP listener and logging.
"""
from __future__ import annotations

import shlex
from functools import lru_cache
from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Snapshot source
    snapshot_command: str = Field(
        "sh -c 'squeue --json | jq .jobs'", alias="SNAPSHOT_COMMAND"
    )
    snapshot_filename: str = Field("squeue.json", alias="SNAPSHOT_FILENAME")
    snapshot_tmp_prefix: str = Field("slurm-query-", alias="SNAPSHOT_TMP_PREFIX")

    # Execution sandbox
    batch_size: int = Field(2048, alias="BATCH_SIZE", gt=0)

    # HTTP
    query_param: str = Field("prql", alias="QUERY_PARAM")
    host: str = Field("127.0.0.1", alias="HOST")
    port: int = Field(3000, alias="PORT")

    # Application
    app_env: str = Field("development", alias="APP_ENV")
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    json_logs: bool = Field(False, alias="JSON_LOGS")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
        frozen=True,
    )

    def snapshot_argv(self) -> List[str]:
        """Split the configured snapshot command into an argv list."""
        return shlex.split(self.snapshot_command)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Retrieve a cached instance of Settings to avoid repeated env parsing.
    """
    return Settings()


__all__ = ["Settings", "get_settings"]
