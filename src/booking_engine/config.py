"""Engine configuration and settings management."""

from datetime import time
from pathlib import Path
from typing import Any, Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables or defaults."""

    model_config = SettingsConfigDict(
        env_prefix="BPE_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    data_root: Path = Field(default=Path("data"), description="Root directory for persisted run outputs.")

    # Distance oracle
    osrm_base_url: Optional[str] = Field(
        default=None,
        description="Base URL for the OSRM routing service (e.g., http://localhost:5000).",
    )
    osrm_profile: Literal["driving", "driving-hgv"] = Field(
        default="driving",
        description="OSRM profile to use when computing travel times.",
    )
    osrm_max_retries: int = Field(default=0, ge=0)
    osrm_backoff_seconds: float = Field(default=0.5, ge=0.0)
    oracle_timeout_seconds: float = Field(default=10.0, gt=0.0)
    oracle_max_parallel_requests: int = Field(default=8, ge=1, le=32)
    oracle_failure_threshold: int = Field(
        default=6,
        ge=1,
        description="Consecutive failed pairs after which the oracle is bypassed for the rest of an optimization.",
    )
    fallback_speed_mph: float = Field(default=35.0, gt=0.0)

    # Clustering
    cluster_radius_miles: float = Field(default=5.0, gt=0.0)
    skip_compact_days: bool = Field(
        default=False,
        description="Skip optimization when every job of the day falls in one tight cluster.",
    )
    compact_day_radius_miles: float = Field(default=1.0, ge=0.0)

    # Savings
    assumed_mpg: float = Field(default=25.0, gt=0.0)
    assumed_gas_price: float = Field(default=3.50, ge=0.0)
    co2_lbs_per_mile: float = Field(default=0.89, ge=0.0)
    kg_per_lb: float = Field(default=0.453592, gt=0.0)

    # Workflow
    min_time_saved_minutes: float = Field(default=15.0, ge=0.0)
    day_start_time: time = Field(default=time(8, 0))
    travel_buffer_minutes: int = Field(default=30, ge=0)
    default_job_duration_minutes: int = Field(default=90, ge=1)
    daily_run_max_workers: int = Field(default=4, ge=1)

    # Scoring
    auto_approve_threshold: int = Field(default=80, ge=0, le=100)
    manager_review_threshold: int = Field(default=60, ge=0, le=100)

    @field_validator("data_root", mode="before")
    @classmethod
    def _expand_path(cls, value: Any) -> Path:
        path_value = value if isinstance(value, Path) else Path(str(value))
        return path_value.expanduser().resolve()

    @field_validator("day_start_time", mode="before")
    @classmethod
    def _parse_clock_time(cls, value: Any) -> Any:
        """Accept ``HH:MM`` strings from the environment."""
        if isinstance(value, str) and value.count(":") == 1:
            hours, minutes = value.split(":")
            return time(int(hours), int(minutes))
        return value


settings = Settings()
