"""Formatting and presentation helpers."""

from .units import (
    binary_byte_string,
    dec_bytes_per_second_string,
    duration_string,
    get_binary_bytes,
    get_binary_prefix,
    get_decimal_bytes,
    get_decimal_prefix,
)

__all__ = [
    "binary_byte_string",
    "dec_bytes_per_second_string",
    "duration_string",
    "get_binary_bytes",
    "get_binary_prefix",
    "get_decimal_bytes",
    "get_decimal_prefix",
]
