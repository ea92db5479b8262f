"""Validation of uplink envelopes received over MQTT.

Expected format (ChirpStack application integration):
{
    "devEUI": "70b3d5e75e003f2a",
    "fPort": 2,
    "data": "gAAA",
    "timestamp": "2026-01-31T08:00:00.123456Z",
    "deviceName": "level-01",
    "rxInfo": [{"time": "2026-01-31T08:00:00.120000Z"}]
}
"""

from __future__ import annotations

import base64
import binascii
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

logger = logging.getLogger(__name__)


def _parse_iso(value: str) -> datetime:
    dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


class UplinkEvent(BaseModel):
    """Schema for one uplink message."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    dev_eui: str = Field(..., alias="devEUI")
    f_port: int = Field(..., alias="fPort", ge=0, le=255)
    data: str = ""
    timestamp: Optional[str] = None
    device_name: Optional[str] = Field(default=None, alias="deviceName")
    rx_info: list[dict[str, Any]] = Field(default_factory=list, alias="rxInfo")

    @field_validator("dev_eui")
    @classmethod
    def validate_dev_eui(cls, v):
        if not v or not v.strip():
            raise ValueError("devEUI is required")
        return v.strip().lower()

    @field_validator("data")
    @classmethod
    def validate_data(cls, v):
        try:
            base64.b64decode(v, validate=True)
        except (binascii.Error, ValueError) as e:
            raise ValueError(f"data is not valid base64: {e}")
        return v

    @field_validator("timestamp")
    @classmethod
    def validate_timestamp(cls, v):
        if v is None:
            return v
        try:
            _parse_iso(v)
        except ValueError as e:
            raise ValueError(f"Invalid timestamp format: {e}")
        return v

    @property
    def payload(self) -> bytes:
        return base64.b64decode(self.data)

    @property
    def received_at(self) -> datetime:
        """Reading time: explicit timestamp, then first gateway time, then now (UTC)."""
        if self.timestamp:
            return _parse_iso(self.timestamp)
        for rx in self.rx_info:
            rx_time = rx.get("time")
            if rx_time:
                try:
                    return _parse_iso(rx_time)
                except ValueError:
                    logger.debug("[UPLINK] Ignoring unparseable rxInfo time %r", rx_time)
        return datetime.now(timezone.utc)


@dataclass
class ValidationResult:
    """Result of validating an uplink envelope."""

    valid: bool
    event: Optional[UplinkEvent] = None
    error: Optional[str] = None
    warnings: list[str] = None

    def __post_init__(self):
        if self.warnings is None:
            self.warnings = []


def validate_uplink(data: Any) -> ValidationResult:
    """Validate a decoded JSON uplink.

    Args:
        data: Dictionary parsed from the MQTT message body

    Returns:
        ValidationResult with the event or the error
    """
    if not isinstance(data, dict):
        return ValidationResult(valid=False, error=f"uplink must be a JSON object, got {type(data).__name__}")

    warnings = []
    data = dict(data)

    if "devEUI" not in data and "dev_eui" in data:
        data["devEUI"] = data.pop("dev_eui")
        warnings.append("Used snake_case dev_eui instead of devEUI")

    if "fPort" not in data and "f_port" in data:
        data["fPort"] = data.pop("f_port")
        warnings.append("Used snake_case f_port instead of fPort")

    try:
        event = UplinkEvent(**data)
    except (ValidationError, TypeError) as e:
        logger.warning("[UPLINK] Validation failed: %s", e)
        return ValidationResult(valid=False, error=str(e))

    return ValidationResult(valid=True, event=event, warnings=warnings)
