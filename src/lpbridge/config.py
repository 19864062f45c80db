from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field

Backend = Literal["highs", "glpk", "gurobi"]


class SolverConfig(BaseModel):
    glpk_command: str = "glpsol"
    gurobi_command: str = "gurobi_cl"
    workdir: Path = Field(default_factory=lambda: Path(tempfile.gettempdir()))
    log_level: str = "WARNING"
    default_backend: Backend = "highs"

    @classmethod
    def from_env(cls) -> "SolverConfig":
        overrides = {}
        env_fields = {
            "LPBRIDGE_GLPK_COMMAND": "glpk_command",
            "LPBRIDGE_GUROBI_COMMAND": "gurobi_command",
            "LPBRIDGE_WORKDIR": "workdir",
            "LPBRIDGE_LOG_LEVEL": "log_level",
            "LPBRIDGE_BACKEND": "default_backend",
        }
        for env_name, field in env_fields.items():
            value = os.environ.get(env_name)
            if value:
                overrides[field] = value
        return cls.model_validate(overrides)


def configure_logging(level: str = "WARNING") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
