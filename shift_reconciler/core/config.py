# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Core configuration: all env-driven, zero hardcode.
Single source of truth for every tunable parameter.
"""

import os


class Settings:
    """Application settings loaded from environment variables."""

    SERVICE_NAME: str = os.getenv("SERVICE_NAME", "shift-reconciler")
    SERVICE_VERSION: str = os.getenv("SERVICE_VERSION", "1.0.0")
    SERVICE_PORT: int = int(os.getenv("SERVICE_PORT", "8010"))

    # Base URL of the scheduling backend that owns attendance, slots and assignments
    UPSTREAM_API_URL: str = os.getenv("UPSTREAM_API_URL", "http://backend:8080")
    UPSTREAM_TIMEOUT: float = float(os.getenv("UPSTREAM_TIMEOUT", "5.0"))
    DEFAULT_TENANT_ID: str = os.getenv("DEFAULT_TENANT_ID", "")

    UNCLASSIFIED_INSTANCE_NAME: str = os.getenv(
        "UNCLASSIFIED_INSTANCE_NAME", "Unclassified"
    )

    # Business days shown in the attendance history beside the pool
    ACTUAL_ATTENDANCE_LIMIT: int = int(os.getenv("ACTUAL_ATTENDANCE_LIMIT", "10"))
    ACTUAL_ATTENDANCE_FUTURE_LIMIT: int = int(os.getenv("ACTUAL_ATTENDANCE_FUTURE_LIMIT", "100"))

    DEFAULT_HISTORY_LIMIT: int = int(os.getenv("DEFAULT_HISTORY_LIMIT", "100"))
    MAX_HISTORY_SIZE: int = int(os.getenv("MAX_HISTORY_SIZE", "10000"))

    CORS_ORIGINS: list[str] = os.getenv("CORS_ORIGINS", "*").split(",")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")


settings = Settings()
