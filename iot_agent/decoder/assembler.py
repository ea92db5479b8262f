"""Accumulation of interpreted fields into one decoded record."""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, Dict, Optional


@dataclass
class DecodedFields:
    """Physical quantities found in one frame.

    Every field is None unless its tag appeared in the frame.
    """
    filling_percentage: Optional[float] = None
    filling_level: Optional[int] = None  # cm
    pressure: Optional[float] = None  # Pa
    temperature: Optional[float] = None  # Cel
    relative_humidity: Optional[float] = None  # %RH
    battery_voltage: Optional[float] = None  # mV

    def is_empty(self) -> bool:
        return all(getattr(self, f.name) is None for f in fields(self))

    def to_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self) if getattr(self, f.name) is not None}


class PayloadAssembler:
    """Collects field updates; a later occurrence of a tag wins."""

    def __init__(self):
        self._fields = DecodedFields()

    def add(self, update: Dict[str, Any]) -> None:
        for name, value in update.items():
            setattr(self._fields, name, value)

    def result(self) -> DecodedFields:
        return self._fields
