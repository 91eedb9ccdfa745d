"""
Runtime settings

Settings are plain pydantic models built once at process startup and passed
to the components that need them. ``Settings.from_env`` reads the
SUPPLIERIQ_* environment variables.
"""

import os
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

_TRUTHY = {"1", "true", "yes", "on"}


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in _TRUTHY


class Settings(BaseModel):
    """Process-wide configuration for SupplierIQ"""

    db_path: Path | None = Field(
        default=None,
        description="SQLite database file (None = in-memory store)",
    )

    log_level: LogLevel = Field(default="INFO", description="Logging level")

    json_logs: bool = Field(
        default=False,
        description="Emit JSON logs instead of console output",
    )

    mark_failed_on_error: bool = Field(
        default=True,
        description=(
            "Move a request to FAILED when suggestion generation raises after "
            "processing began; False leaves it in PROCESSING"
        ),
    )

    max_concurrent_candidate_loads: int = Field(
        default=8,
        ge=1,
        le=256,
        description="Upper bound on suppliers whose history is loaded at the same time",
    )

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from SUPPLIERIQ_* environment variables"""
        db_path = os.getenv("SUPPLIERIQ_DB_PATH")
        production = os.getenv("ENVIRONMENT", "development").lower() == "production"
        return cls(
            db_path=Path(db_path) if db_path else None,
            log_level=os.getenv("SUPPLIERIQ_LOG_LEVEL", "INFO").upper(),
            json_logs=_env_bool("SUPPLIERIQ_JSON_LOGS", production),
            mark_failed_on_error=_env_bool("SUPPLIERIQ_MARK_FAILED_ON_ERROR", True),
            max_concurrent_candidate_loads=int(
                os.getenv("SUPPLIERIQ_MAX_CONCURRENT_LOADS", "8")
            ),
        )
