"""Conversion of coin-denominated daemon values into integer atoms."""

import math
from typing import Any

from .constants import ATOMS_PER_COIN


class AmountError(ValueError):
    """Raised when a daemon value cannot be represented as an amount."""


def to_atoms(value: Any) -> int:
    """
    Convert a coin value (as reported over RPC) into atoms.

    Rounds half away from zero to the nearest atom.

    Args:
        value: Amount in whole coins (float, int, or numeric string)

    Returns:
        Amount in atoms

    Raises:
        AmountError: If the value is not numeric, NaN, or infinite
    """
    if isinstance(value, bool):
        raise AmountError(f"invalid coin amount: {value!r}")
    try:
        coins = float(value)
    except (TypeError, ValueError):
        raise AmountError(f"invalid coin amount: {value!r}") from None

    if math.isnan(coins) or math.isinf(coins):
        raise AmountError(f"invalid coin amount: {value!r}")

    scaled = coins * ATOMS_PER_COIN
    if scaled < 0:
        return -int(math.floor(-scaled + 0.5))
    return int(math.floor(scaled + 0.5))


def to_coins(atoms: int) -> float:
    """Format atoms as whole coins for display."""
    return atoms / ATOMS_PER_COIN
