"""Ticket fee estimation from recent blocks and historical difficulty windows."""

from dataclasses import dataclass
from typing import List

from .amount import to_atoms
from .chain import ChainClient
from .constants import WINDOWS_TO_CONSIDER
from .errors import InsufficientDataError
from .logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class FeeEstimate:
    """Result of one estimation call.

    A fee of zero means the heuristic had no price signal and the caller
    should use a fallback; ``has_signal`` makes that explicit.
    """
    fee: int      # atoms
    source: str   # "blocks" or "windows"

    @property
    def has_signal(self) -> bool:
        return self.fee > 0

    @classmethod
    def no_signal(cls, source: str) -> "FeeEstimate":
        return cls(fee=0, source=source)


@dataclass(frozen=True)
class RankedWindow:
    """A difficulty window scored against the target difficulty."""
    difficulty: int
    difference: int  # absolute distance from the target difficulty
    fee: int


def _select_fee(stat, use_median: bool) -> int:
    return to_atoms(stat.median_fee if use_median else stat.mean_fee)


class WindowFeeEstimator:
    """Picks the fee of the past difficulty window closest to a target difficulty."""

    def __init__(self, chain: ChainClient, stake_diff_window_size: int,
                 windows_to_consider: int = WINDOWS_TO_CONSIDER):
        """
        Args:
            chain: Chain query service
            stake_diff_window_size: Blocks in a full stake difficulty window
            windows_to_consider: How many recent windows to scan
        """
        self.chain = chain
        self.stake_diff_window_size = stake_diff_window_size
        self.windows_to_consider = windows_to_consider

    def rank_windows(self, target_difficulty: int, use_median: bool = False) -> List[RankedWindow]:
        """
        Score recent difficulty windows by distance from the target difficulty.

        The first window is dropped when it is still filling up, and windows
        without ticket purchases (zero fee) are dropped. Any daemon or amount
        error aborts the whole ranking.

        Args:
            target_difficulty: Stake difficulty to match, in atoms
            use_median: Rank by median fee instead of mean fee

        Returns:
            Candidates ordered by ascending difference; ties keep daemon order

        Raises:
            InsufficientDataError: If the daemon reports no windows at all
        """
        info = self.chain.ticket_fee_info(blocks=0, windows=self.windows_to_consider)
        if not info.fee_info_windows:
            raise InsufficientDataError("not enough windows to find mean fee available")

        candidates = []
        for i, window in enumerate(info.fee_info_windows):
            if i == 0 and window.span < self.stake_diff_window_size:
                logger.debug(
                    f"Skipping partial window {window.start_height}-{window.end_height} "
                    f"(span {window.span} < {self.stake_diff_window_size})"
                )
                continue

            block_hash = self.chain.get_block_hash(window.start_height)
            header = self.chain.get_block_header(block_hash)

            fee = _select_fee(window, use_median)
            if fee == 0:
                # No tickets were bought in this window
                logger.debug(f"Skipping window {window.start_height}-{window.end_height}: no fee data")
                continue

            candidates.append(RankedWindow(
                difficulty=header.sbits,
                difference=abs(header.sbits - target_difficulty),
                fee=fee,
            ))

        # sorted() is stable, so equal differences stay in encounter order
        return sorted(candidates, key=lambda c: c.difference)

    def estimate(self, target_difficulty: int, use_median: bool = False) -> FeeEstimate:
        """
        Estimate a ticket fee from the window whose difficulty is closest to the target.

        Returns a no-signal estimate (fee 0) rather than raising when every
        window was filtered out.
        """
        ranked = self.rank_windows(target_difficulty, use_median)
        if not ranked:
            logger.info(f"No usable fee windows near difficulty {target_difficulty}")
            return FeeEstimate.no_signal("windows")

        best = ranked[0]
        logger.info(
            f"Closest window difficulty {best.difficulty} "
            f"(off by {best.difference}) gives fee {best.fee}"
        )
        return FeeEstimate(fee=best.fee, source="windows")


class RecentBlockFeeEstimator:
    """Averages per-block ticket fees over the most recent blocks."""

    def __init__(self, chain: ChainClient):
        self.chain = chain

    def estimate(self, blocks_to_average: int, use_median: bool = False) -> FeeEstimate:
        """
        Average the mean (or median) ticket fee of the last blocks.

        The sum is divided by ``blocks_to_average`` even when the daemon
        returns fewer blocks, so a short result understates the average.

        Args:
            blocks_to_average: Number of recent blocks to request and divide by
            use_median: Average block medians instead of block means

        Returns:
            FeeEstimate in atoms (no signal when the average is zero)
        """
        if blocks_to_average <= 0:
            raise ValueError(f"blocks_to_average must be positive, got {blocks_to_average}")

        info = self.chain.ticket_fee_info(blocks=blocks_to_average, windows=None)

        total = 0
        for stat in info.fee_info_blocks:
            total += _select_fee(stat, use_median)

        if len(info.fee_info_blocks) < blocks_to_average:
            logger.debug(
                f"Daemon returned {len(info.fee_info_blocks)} of {blocks_to_average} blocks"
            )

        fee = total // blocks_to_average
        if fee == 0:
            return FeeEstimate.no_signal("blocks")
        logger.info(f"Average ticket fee over {blocks_to_average} blocks: {fee}")
        return FeeEstimate(fee=fee, source="blocks")
