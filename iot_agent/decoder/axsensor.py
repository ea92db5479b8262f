"""Decoder for axsensor level/environment uplinks.

Flow:
  port check
  → read_chunks (frame_reader)
  → interpret_field (fields)
  → PayloadAssembler
  → to_canonical_objects (mapper)

Pure function of its inputs: no I/O, no shared state.
"""

from __future__ import annotations

from datetime import datetime
from typing import List

from ..domain.objects import CanonicalObject
from .assembler import DecodedFields, PayloadAssembler
from .errors import InvalidPort
from .fields import interpret_field
from .frame_reader import read_chunks
from .mapper import to_canonical_objects

AXSENSOR_PORT = 2


def decode_fields(payload: bytes) -> DecodedFields:
    """Scan and interpret a frame without mapping it.

    Raises:
        FrameTruncated: the frame ends mid-chunk
    """
    assembler = PayloadAssembler()
    for chunk in read_chunks(payload):
        assembler.add(interpret_field(chunk.tag, chunk.value))
    return assembler.result()


def decode(port: int, payload: bytes, device_id: str, timestamp: datetime) -> List[CanonicalObject]:
    """Decode one axsensor uplink into canonical objects.

    Args:
        port: LoRaWAN fPort of the uplink, must be 2
        payload: raw frame bytes
        device_id: identifier stamped on every object
        timestamp: time of the reading

    Returns:
        Objects in fixed order; empty when the frame has no known tags

    Raises:
        InvalidPort: port is not 2
        FrameTruncated: the frame ends mid-chunk; no partial result is returned
    """
    if port != AXSENSOR_PORT:
        raise InvalidPort(port=port, expected=AXSENSOR_PORT)

    decoded = decode_fields(bytes(payload))
    return to_canonical_objects(device_id, decoded, timestamp)
