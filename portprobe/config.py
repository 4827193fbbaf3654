"""
Environment-driven defaults for the command line.

Every knob can be set with a PORTPROBE_* variable (or a .env file); explicit
CLI flags still win. The scan core never reads these directly; it only sees
the ScanConfig built from them.
"""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .models import MAX_PORT, MIN_PORT


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="PORTPROBE_", case_sensitive=False, env_file=".env", extra="ignore"
    )

    # Targets
    target: str = Field("scanme.nmap.org", description="comma-separated hosts, IPs or CIDRs")
    start_port: int = Field(0, ge=MIN_PORT, le=MAX_PORT)
    end_port: int = Field(100, ge=MIN_PORT, le=MAX_PORT)

    # Concurrency and pacing
    workers: int = Field(100, ge=1)
    delay: float = Field(0.1, ge=0, description="seconds between task enqueues")

    # Connection behaviour
    timeout: float = Field(1.0, gt=0, description="connect and banner-read timeout in seconds")
    retries: int = Field(2, ge=1)
    backoff_unit: float = Field(1.0, ge=0)
    banner_size: int = Field(1024, ge=1)

    log_level: str = Field("WARNING")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        v = v.upper()
        if v not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError("log_level must be a standard logging level name")
        return v


@lru_cache()
def get_settings() -> Settings:
    return Settings()
