"""Runtime settings for the analysis controller."""

from __future__ import annotations

import os
from typing import Literal, Mapping

from pydantic import BaseModel, ConfigDict, Field

from scn_common.config.env import parse_float_env
from scn_common.log_schema import LogLevel


class WorkbenchSettings(BaseModel):
    """Settings consumed by the JobController and its isolated context."""

    model_config = ConfigDict(frozen=True)

    asset_base_location: str | None = Field(
        default=None,
        description="Directory with analyzer assets; None uses the bundled grammars.",
    )
    log_level: LogLevel = Field(
        default=LogLevel.DEBUG,
        description="Lowest analyzer log level streamed back for each job.",
    )
    start_method: Literal["spawn", "forkserver", "fork"] = "spawn"
    init_timeout_seconds: float = Field(default=30.0, gt=0)
    shutdown_timeout_seconds: float = Field(default=2.0, gt=0)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "WorkbenchSettings":
        """Build settings from SCN_* environment variables."""
        env = os.environ if environ is None else environ
        values: dict[str, object] = {}
        if env.get("SCN_ASSET_BASE"):
            values["asset_base_location"] = env["SCN_ASSET_BASE"]
        if env.get("SCN_ANALYSIS_LOG_LEVEL"):
            values["log_level"] = LogLevel.parse(env["SCN_ANALYSIS_LOG_LEVEL"])
        init_timeout = parse_float_env(env.get("SCN_INIT_TIMEOUT"))
        if init_timeout is not None:
            values["init_timeout_seconds"] = init_timeout
        shutdown_timeout = parse_float_env(env.get("SCN_SHUTDOWN_TIMEOUT"))
        if shutdown_timeout is not None:
            values["shutdown_timeout_seconds"] = shutdown_timeout
        return cls(**values)
