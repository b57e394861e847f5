"""Magnitude formatting helpers: binary/decimal prefixes, byte strings, durations."""

from __future__ import annotations

from typing import Tuple

KILO_LIMIT = 1000
MEGA_LIMIT = 1_000_000
GIGA_LIMIT = 1_000_000_000
TERA_LIMIT = 1_000_000_000_000
KIBI_LIMIT = 1024
MEBI_LIMIT = 1024 ** 2
GIBI_LIMIT = 1024 ** 3
TEBI_LIMIT = 1024 ** 4


def get_binary_prefix(quantity: int, unit: str) -> Tuple[float, str]:
    """Scale ``quantity`` to the closest binary prefix (Ki, Mi, Gi, Ti) of ``unit``."""
    if quantity < KIBI_LIMIT:
        return float(quantity), unit
    if quantity < MEBI_LIMIT:
        return quantity / KIBI_LIMIT, f"Ki{unit}"
    if quantity < GIBI_LIMIT:
        return quantity / MEBI_LIMIT, f"Mi{unit}"
    if quantity < TEBI_LIMIT:
        return quantity / GIBI_LIMIT, f"Gi{unit}"
    return quantity / TEBI_LIMIT, f"Ti{unit}"


def get_decimal_prefix(quantity: int, unit: str) -> Tuple[float, str]:
    """Scale ``quantity`` to the closest SI prefix (K, M, G, T) of ``unit``."""
    if quantity < KILO_LIMIT:
        return float(quantity), unit
    if quantity < MEGA_LIMIT:
        return quantity / KILO_LIMIT, f"K{unit}"
    if quantity < GIGA_LIMIT:
        return quantity / MEGA_LIMIT, f"M{unit}"
    if quantity < TERA_LIMIT:
        return quantity / GIGA_LIMIT, f"G{unit}"
    return quantity / TERA_LIMIT, f"T{unit}"


def get_binary_bytes(bytes_: int) -> Tuple[float, str]:
    return get_binary_prefix(bytes_, "B")


def get_decimal_bytes(bytes_: int) -> Tuple[float, str]:
    return get_decimal_prefix(bytes_, "B")


def binary_byte_string(value: int) -> str:
    """Format a byte count with a binary prefix.

    Values of a gibibyte or more get one decimal place, anything smaller is
    shown as a whole number.
    """
    converted, unit = get_binary_bytes(value)
    if value >= GIBI_LIMIT:
        return f"{converted:.1f}{unit}"
    return f"{converted:.0f}{unit}"


def dec_bytes_per_second_string(value: int) -> str:
    """Format a byte rate with an SI prefix, one decimal place from a gigabyte up."""
    converted, unit = get_decimal_bytes(value)
    if value >= GIGA_LIMIT:
        return f"{converted:.1f}{unit}/s"
    return f"{converted:.0f}{unit}/s"


def _plural(count: int) -> str:
    return "" if count == 1 else "s"


def duration_string(seconds: int) -> str:
    """Render a whole number of seconds as ``"H hours, M minutes, S seconds"``."""
    hours, remainder = divmod(int(seconds), 3600)
    minutes, secs = divmod(remainder, 60)
    return (
        f"{hours} hour{_plural(hours)}, "
        f"{minutes} minute{_plural(minutes)}, "
        f"{secs} second{_plural(secs)}"
    )
