"""Text validators for numeric input fields."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

UINT_MAX = 0xFFFFFFFF
_INT32 = (-(1 << 31), (1 << 31) - 1)
_INT64 = (-(1 << 63), (1 << 63) - 1)
_UINT64 = (0, (1 << 64) - 1)


class ValidatorState(Enum):
    """Outcome of validating a piece of text."""

    INVALID = 0
    INTERMEDIATE = 1
    ACCEPTABLE = 2


def _parse(text: str, base: int, limits: tuple[int, int], allow_negative: bool = True) -> int | None:
    stripped = text.strip()
    if not stripped or not stripped.isascii() or "_" in stripped:
        return None
    if not allow_negative and stripped.startswith("-"):
        return None
    try:
        value = int(stripped, base)
    except ValueError:
        return None
    low, high = limits
    return value if low <= value <= high else None


@dataclass
class HexValidator:
    """Accepts empty text or any hexadecimal number that fits a 32-bit int."""

    bottom: int | None = None
    top: int | None = None

    def validate(self, text: str) -> ValidatorState:
        if not text or _parse(text, 16, _INT32) is not None:
            return ValidatorState.ACCEPTABLE
        return ValidatorState.INVALID


@dataclass
class Int64Validator:
    """Accepts decimal 64-bit integers within ``[bottom, top]``."""

    bottom: int = 0
    top: int = UINT_MAX

    def validate(self, text: str) -> ValidatorState:
        value = _parse(text, 10, _INT64)
        if value is not None and self.bottom <= value <= self.top:
            return ValidatorState.ACCEPTABLE
        return ValidatorState.INVALID


@dataclass
class UIntValidator:
    """Accepts decimal unsigned 64-bit integers within ``[bottom, top]``."""

    bottom: int = 0
    top: int = UINT_MAX

    def validate(self, text: str) -> ValidatorState:
        value = _parse(text, 10, _UINT64, allow_negative=False)
        if value is not None and self.bottom <= value <= self.top:
            return ValidatorState.ACCEPTABLE
        return ValidatorState.INVALID