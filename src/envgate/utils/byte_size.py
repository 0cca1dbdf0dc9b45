"""Parse human-readable memory quantities such as ``128M`` into byte counts."""

from __future__ import annotations

from typing import Final

_UNIT_TIERS: Final[dict[str, int]] = {"k": 1, "m": 2, "g": 3}


def parse_byte_size(value: str) -> int:
    """Return the number of bytes denoted by ``value``.

    A trailing ``k``, ``m`` or ``g`` (case-insensitive) scales the integer
    prefix by ``1024``, ``1024**2`` or ``1024**3``. Without a unit suffix the
    whole string is taken as a byte count. Empty and non-numeric input raises
    ``ValueError``.
    """

    if not isinstance(value, str):
        raise ValueError(f"byte size must be a string, got {type(value).__name__}")
    normalized = value.strip()
    if not normalized:
        raise ValueError("byte size must not be empty")

    tier = _UNIT_TIERS.get(normalized[-1].lower(), 0)
    digits = normalized[:-1].strip() if tier else normalized
    try:
        number = int(digits)
    except ValueError as exc:
        raise ValueError(f"invalid byte size {value!r}") from exc
    return number * 1024**tier


__all__ = ["parse_byte_size"]
