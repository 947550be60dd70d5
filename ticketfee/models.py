"""Typed records returned by the chain query service."""

from dataclasses import dataclass, field
from typing import Any, List, Optional


@dataclass(frozen=True)
class FeeBlockStat:
    """Ticket fee statistics for a single block (fees in coins, as reported)."""
    mean_fee: Any
    median_fee: Any
    height: Optional[int] = None


@dataclass(frozen=True)
class FeeWindowStat:
    """Ticket fee statistics for one stake difficulty window."""
    start_height: int
    end_height: int   # exclusive
    mean_fee: Any
    median_fee: Any

    @property
    def span(self) -> int:
        return self.end_height - self.start_height


@dataclass(frozen=True)
class TicketFeeInfo:
    fee_info_blocks: List[FeeBlockStat] = field(default_factory=list)
    fee_info_windows: List[FeeWindowStat] = field(default_factory=list)


@dataclass(frozen=True)
class BlockHeader:
    """The parts of a block header the estimators read."""
    hash: str
    height: int
    sbits: int  # stake difficulty in atoms


@dataclass(frozen=True)
class StakeDifficulty:
    current: int  # atoms
    next: int     # atoms
