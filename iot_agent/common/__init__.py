"""Common utilities - configuration and numeric precision."""

from .config import Settings, get_settings
from .numeric_precision import round_to_precision, truncate_to_int, int_div_toward_zero

__all__ = [
    "Settings",
    "get_settings",
    "round_to_precision",
    "truncate_to_int",
    "int_div_toward_zero",
]
