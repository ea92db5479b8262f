"""Canonical measurement objects.

Unit-normalized records modelled on the OMA LwM2M object registry. This is
the contract handed to every sink, independent of the wire encoding the
reading arrived in.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, ClassVar, Dict, Optional

LWM2M_URN_PREFIX = "urn:oma:lwm2m:ext:"


@dataclass
class CanonicalObject:
    """Base for all measurement objects."""
    device_id: str
    timestamp: datetime

    object_id: ClassVar[int] = 0

    @property
    def urn(self) -> str:
        return f"{LWM2M_URN_PREFIX}{self.object_id}"

    def to_dict(self) -> Dict[str, Any]:
        """Variant value fields, using their JSON names."""
        raise NotImplementedError

    def to_message(self) -> Dict[str, Any]:
        """Envelope published to sinks."""
        return {
            "deviceID": self.device_id,
            "urn": self.urn,
            "timestamp": self.timestamp.isoformat(),
            "value": self.to_dict(),
        }


@dataclass
class FillingLevel(CanonicalObject):
    filling_percentage: float = 0.0
    actual_filling_level: Optional[int] = None  # cm

    object_id: ClassVar[int] = 3435

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"fillingPercentage": self.filling_percentage}
        if self.actual_filling_level is not None:
            data["fillinglevel"] = self.actual_filling_level
        return data


@dataclass
class Pressure(CanonicalObject):
    pressure: float = 0.0  # Pa

    object_id: ClassVar[int] = 3323

    def to_dict(self) -> Dict[str, Any]:
        return {"pressure": self.pressure}


@dataclass
class Humidity(CanonicalObject):
    relative_humidity: float = 0.0  # %RH

    object_id: ClassVar[int] = 3304

    def to_dict(self) -> Dict[str, Any]:
        return {"relativeHumidity": self.relative_humidity}


@dataclass
class Temperature(CanonicalObject):
    temperature: float = 0.0  # Cel

    object_id: ClassVar[int] = 3303

    def to_dict(self) -> Dict[str, Any]:
        return {"temperature": self.temperature}


@dataclass
class Device(CanonicalObject):
    power_source_voltage: Optional[int] = None  # mV

    object_id: ClassVar[int] = 3

    def to_dict(self) -> Dict[str, Any]:
        if self.power_source_voltage is None:
            return {}
        return {"powerSourceVoltage": self.power_source_voltage}
