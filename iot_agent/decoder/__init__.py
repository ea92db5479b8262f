"""Binary payload decoders.

Layout:
- frame_reader.py → tag scanner and chunk length classes
- fields.py       → per-tag physical quantity interpreters
- assembler.py    → DecodedFields record
- mapper.py       → DecodedFields → canonical objects
- axsensor.py     → port check and pipeline orchestration
"""

from __future__ import annotations

from datetime import datetime
from typing import Callable, Dict, List

from ..domain.objects import CanonicalObject
from . import axsensor
from .errors import DecodeError, FrameTruncated, InvalidPort

DecoderFunc = Callable[[int, bytes, str, datetime], List[CanonicalObject]]

DECODERS: Dict[str, DecoderFunc] = {
    "axsensor": axsensor.decode,
}


def get_decoder(name: str) -> DecoderFunc:
    """Decoder callable for a sensor family."""
    try:
        return DECODERS[name.strip().lower()]
    except KeyError:
        known = ", ".join(sorted(DECODERS))
        raise KeyError(f"unknown decoder '{name}' (known: {known})") from None


__all__ = [
    "DECODERS",
    "DecoderFunc",
    "get_decoder",
    "DecodeError",
    "FrameTruncated",
    "InvalidPort",
]
