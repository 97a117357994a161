"""Exporter configuration read from NEW_RELIC_* environment variables"""
from pathlib import Path
from typing import Any, Dict, Optional
from pydantic import Field, validator
from pydantic_settings import BaseSettings

VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class Config(BaseSettings):
    """New Relic exporter settings, assembled once at startup"""

    # Sender settings
    api_key: str = Field(default="", description="New Relic insert API key")
    enable_audit_logging: bool = Field(default=False, description="Log every metric handed to the sender")
    metric_uri_override: str = Field(default="", description="Override the metric ingest endpoint")

    # Common attributes
    service_name: str = Field(default="(unknown service)", description="Service name")

    # Export cycle
    export_interval_millis: int = Field(default=5000, ge=1, description="Export interval in milliseconds")

    # Logging
    log_level: str = Field(default="INFO", description="Log level")
    log_file: Optional[Path] = Field(default=None, description="Optional log file")

    class Config:
        env_prefix = "NEW_RELIC_"
        case_sensitive = False

    @validator('metric_uri_override')
    def validate_metric_uri_override(cls, v):
        v = v.strip()
        if v and not v.startswith(("http://", "https://")):
            raise ValueError("NEW_RELIC_METRIC_URI_OVERRIDE must be an http(s) URL")
        return v

    @validator('log_level')
    def validate_log_level(cls, v):
        level = v.upper()
        if level not in VALID_LOG_LEVELS:
            raise ValueError(f"Invalid log level: {v}")
        return level

    @validator('log_file')
    def ensure_log_directory(cls, v):
        if isinstance(v, Path):
            v.parent.mkdir(parents=True, exist_ok=True)
        return v

    def is_metric_uri_specified(self) -> bool:
        return bool(self.metric_uri_override)

    def get_common_attributes(self) -> Dict[str, Any]:
        """Attributes attached to every exported metric"""
        return {"service.name": self.service_name}

    def sender_settings(self):
        """Settings handed to the sending client"""
        from nr_metrics.senders import SenderSettings
        return SenderSettings(
            api_key=self.api_key,
            enable_audit_logging=self.enable_audit_logging,
            uri_override=self.metric_uri_override if self.is_metric_uri_specified() else None,
        )
