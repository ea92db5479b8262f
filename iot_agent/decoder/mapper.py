"""Mapping of decoded fields to canonical measurement objects."""

from __future__ import annotations

from datetime import datetime
from typing import List

from ..common.numeric_precision import truncate_to_int
from ..domain.objects import CanonicalObject, Device, FillingLevel, Humidity, Pressure, Temperature
from .assembler import DecodedFields


def to_canonical_objects(
    device_id: str,
    decoded: DecodedFields,
    timestamp: datetime,
) -> List[CanonicalObject]:
    """Build objects in a fixed order: filling level, pressure, humidity,
    temperature, device. Absent fields produce no object.
    """
    objects: List[CanonicalObject] = []

    if decoded.filling_percentage is not None:
        objects.append(FillingLevel(
            device_id=device_id,
            timestamp=timestamp,
            filling_percentage=decoded.filling_percentage,
            actual_filling_level=decoded.filling_level,
        ))

    if decoded.pressure is not None:
        objects.append(Pressure(device_id=device_id, timestamp=timestamp, pressure=decoded.pressure))

    if decoded.relative_humidity is not None:
        objects.append(Humidity(
            device_id=device_id,
            timestamp=timestamp,
            relative_humidity=decoded.relative_humidity,
        ))

    if decoded.temperature is not None:
        objects.append(Temperature(device_id=device_id, timestamp=timestamp, temperature=decoded.temperature))

    if decoded.battery_voltage is not None:
        objects.append(Device(
            device_id=device_id,
            timestamp=timestamp,
            power_source_voltage=truncate_to_int(decoded.battery_voltage),
        ))

    return objects
