"""Per-tag interpretation of axsensor chunk values.

TAG_TABLE maps a tag byte to the physical quantity it carries. Adding a tag
only needs a new entry here; the frame scanner derives chunk lengths from
the tag range alone.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict

from ..common.numeric_precision import int_div_toward_zero, round_to_precision, truncate_to_int
from .frame_reader import chunk_length

logger = logging.getLogger(__name__)

# Distance from the sensor to the bottom of the container, in mm
CONTAINER_HEIGHT_MM = 1400

FieldUpdate = Dict[str, Any]


def _u16(value: bytes) -> int:
    return int.from_bytes(value[0:2], "little", signed=False)


def _s16(value: bytes) -> int:
    return int.from_bytes(value[0:2], "little", signed=True)


def interpret_filling(value: bytes) -> FieldUpdate:
    # Firmware reports distance in 1/10 mm; the division is 16-bit integer math.
    raw = _s16(value)
    height = float(CONTAINER_HEIGHT_MM - int_div_toward_zero(raw, 10))
    percentage = round_to_precision(height * 100 / CONTAINER_HEIGHT_MM)
    level_cm = truncate_to_int((height + 5) / 10)
    return {"filling_percentage": percentage, "filling_level": level_cm}


def interpret_pressure(value: bytes) -> FieldUpdate:
    return {"pressure": (float(value[0]) + float(value[1]) * 256) * 100}


def interpret_temperature(value: bytes) -> FieldUpdate:
    return {"temperature": float(_u16(value)) / 10}


def interpret_humidity(value: bytes) -> FieldUpdate:
    return {"relative_humidity": (float(value[0]) + float(value[1]) * 256) / 1024 * 100}


def interpret_battery(value: bytes) -> FieldUpdate:
    return {"battery_voltage": float(_u16(value))}


@dataclass(frozen=True)
class TagSpec:
    """Decode behaviour registered for one tag."""
    tag: int
    name: str
    unit: str
    interpret: Callable[[bytes], FieldUpdate]

    @property
    def length(self) -> int:
        return chunk_length(self.tag)


TAG_TABLE: Dict[int, TagSpec] = {
    entry.tag: entry
    for entry in (
        TagSpec(0x80, "filling", "mm", interpret_filling),
        TagSpec(0xA1, "pressure", "Pa", interpret_pressure),
        TagSpec(0xA2, "temperature", "Cel", interpret_temperature),
        TagSpec(0xA3, "humidity", "%RH", interpret_humidity),
        TagSpec(0xA4, "battery", "mV", interpret_battery),
    )
}


def interpret_field(tag: int, value: bytes) -> FieldUpdate:
    """Compute the fields carried by one chunk; unknown tags yield nothing."""
    entry = TAG_TABLE.get(tag)
    if entry is None:
        logger.debug("[DECODER] Skipping unknown tag 0x%02X (%d value bytes)", tag, len(value))
        return {}
    return entry.interpret(value)
