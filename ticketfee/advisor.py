"""Purchase-time ticket fee selection built on the two estimators."""

from typing import Any, Dict, Optional

from .chain import ChainClient
from .config import Config
from .constants import (
    DEFAULT_BLOCKS_TO_AVG,
    DEFAULT_FEE_TARGET_SCALING,
    DEFAULT_MAX_FEE_ATOMS,
    DEFAULT_MIN_FEE_ATOMS,
    WINDOWS_TO_CONSIDER,
)
from .errors import InsufficientDataError
from .fees import RecentBlockFeeEstimator, WindowFeeEstimator
from .logging import get_logger
from .rpc import RPCClient

logger = get_logger(__name__)


def clamp_fee(fee: int, min_fee: int, max_fee: int) -> int:
    """Clamp a fee into [min_fee, max_fee]; a max_fee of 0 means unbounded."""
    if max_fee and fee > max_fee:
        return max_fee
    if fee < min_fee:
        return min_fee
    return fee


class TicketFeeAdvisor:
    """Chooses the fee for the next ticket purchase."""

    def __init__(
        self,
        chain: ChainClient,
        stake_diff_window_size: int,
        blocks_to_avg: int = DEFAULT_BLOCKS_TO_AVG,
        use_median: bool = False,
        min_fee: int = DEFAULT_MIN_FEE_ATOMS,
        max_fee: int = DEFAULT_MAX_FEE_ATOMS,
        fee_target_scaling: float = DEFAULT_FEE_TARGET_SCALING,
        windows_to_consider: int = WINDOWS_TO_CONSIDER,
    ):
        """
        Initialize advisor.

        Args:
            chain: Chain query service
            stake_diff_window_size: Blocks in a full stake difficulty window
            blocks_to_avg: Recent blocks averaged by the block estimator
            use_median: Use median instead of mean fees
            min_fee: Lower bound (and fallback) for the recommended fee, in atoms
            max_fee: Upper bound in atoms, 0 to disable
            fee_target_scaling: Multiplier applied to the raw estimate
            windows_to_consider: Difficulty windows scanned by the window estimator
        """
        if min_fee < 0 or max_fee < 0 or fee_target_scaling < 0:
            raise ValueError(
                f"fee bounds and scaling must not be negative "
                f"(min_fee={min_fee}, max_fee={max_fee}, fee_target_scaling={fee_target_scaling})"
            )
        self.chain = chain
        self.blocks_to_avg = blocks_to_avg
        self.use_median = use_median
        self.min_fee = min_fee
        self.max_fee = max_fee
        self.fee_target_scaling = fee_target_scaling
        self.block_estimator = RecentBlockFeeEstimator(chain)
        self.window_estimator = WindowFeeEstimator(chain, stake_diff_window_size, windows_to_consider)

    @classmethod
    def from_config(cls, config: Config, rpc_client: Optional[RPCClient] = None) -> "TicketFeeAdvisor":
        """Build an advisor talking to the daemon described by config."""
        if rpc_client is None:
            rpc_client = RPCClient(
                config.rpc_url,
                config.rpc_user,
                config.rpc_password,
                timeout=config.rpc_timeout_secs,
                verify_tls=config.rpc_verify_tls,
            )
        return cls(
            ChainClient(rpc_client),
            config.net_params.stake_diff_window_size,
            blocks_to_avg=config.blocks_to_avg,
            use_median=config.use_median,
            min_fee=config.min_fee,
            max_fee=config.max_fee,
            fee_target_scaling=config.fee_target_scaling,
            windows_to_consider=config.windows_to_consider,
        )

    def recommend(self) -> Dict[str, Any]:
        """
        Recommend a ticket fee.

        Recent blocks are tried first. When they carry no fee signal, the
        window whose difficulty is closest to the next stake difficulty is
        used instead. The result is scaled, then clamped.

        Returns:
            Dictionary with fee, source, raw_fee, use_median and, when the
            window strategy ran, target_difficulty
        """
        result: Dict[str, Any] = {"use_median": self.use_median}

        estimate = self.block_estimator.estimate(self.blocks_to_avg, self.use_median)
        if not estimate.has_signal:
            stake_diff = self.chain.get_stake_difficulty()
            result["target_difficulty"] = stake_diff.next
            logger.info(
                f"No ticket fees in the last {self.blocks_to_avg} blocks, "
                f"matching windows against next difficulty {stake_diff.next}"
            )
            try:
                estimate = self.window_estimator.estimate(stake_diff.next, self.use_median)
            except InsufficientDataError as e:
                logger.warning(f"Window fee estimate unavailable: {e}")

        raw_fee = estimate.fee
        fee = clamp_fee(int(raw_fee * self.fee_target_scaling), self.min_fee, self.max_fee)
        result.update({
            "fee": fee,
            "raw_fee": raw_fee,
            "source": estimate.source if estimate.has_signal else "fallback",
        })
        logger.info(f"Recommended ticket fee {fee} atoms (source={result['source']}, raw={raw_fee})")
        return result
