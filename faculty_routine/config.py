"""
Runtime configuration.

Values come from FACULTY_ROUTINE_* environment variables or a .env file in
the working directory.
"""

from __future__ import annotations

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="FACULTY_ROUTINE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Logging
    log_level: str = "INFO"  # DEBUG, INFO, WARNING, ERROR
    log_to_file: bool = False
    log_file_path: str = "logs/faculty_routine.log"
    log_max_bytes: int = 10 * 1024 * 1024  # 10 MB
    log_backup_count: int = 5

    # Store collections
    routines_collection: str = Field(default="routines", min_length=1)
    subjects_collection: str = Field(default="subjects", min_length=1)
    teachers_collection: str = Field(default="teachers", min_length=1)

    # Load weights: a theory class counts as 1, a lab as half a class
    theory_weight: float = Field(default=1.0, ge=0)
    lab_weight: float = Field(default=0.5, ge=0)

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, v: str) -> str:
        v = (v or "INFO").strip().upper()
        if v not in LOG_LEVELS:
            raise ValueError(f"Unknown log level: {v}")
        return v


settings = Settings()
