"""
ShopSolver — Settings
Server-side solver defaults, read from ``SHOPSOLVER_*`` environment variables.
"""

from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .models import SolveOptions


class SolverSettings(BaseSettings):
    """Default SolveOptions for requests that do not carry their own."""
    max_time_in_seconds: Optional[float] = Field(30.0, gt=0)
    num_workers: int = Field(8, ge=0)
    random_seed: Optional[int] = Field(None, ge=0)
    log_search_progress: bool = False
    accept_feasible: bool = False

    model_config = SettingsConfigDict(env_prefix="SHOPSOLVER_", case_sensitive=False)

    @field_validator("max_time_in_seconds", "random_seed", mode="before")
    @classmethod
    def blank_means_none(cls, v):
        # SHOPSOLVER_MAX_TIME_IN_SECONDS="" or "none" lifts the time limit
        if isinstance(v, str) and v.strip().lower() in ("", "none"):
            return None
        return v

    def to_options(self) -> SolveOptions:
        return SolveOptions(**self.model_dump())
