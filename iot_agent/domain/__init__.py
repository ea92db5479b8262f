"""Domain layer - measurement objects and collaborator contracts.

Structure:
- objects.py           → canonical measurement objects
- uplink.py            → MQTT uplink envelope validation
- device_management.py → device identity lookup (stub + HTTP)
- sink.py              → consumers of decoded objects

Only the objects are re-exported here so importing the decoders never pulls
in the collaborator clients.
"""

from .objects import CanonicalObject, Device, FillingLevel, Humidity, Pressure, Temperature

__all__ = [
    "CanonicalObject",
    "Device",
    "FillingLevel",
    "Humidity",
    "Pressure",
    "Temperature",
]
