"""Chain query service backed by the daemon's JSON-RPC interface."""

from typing import Any, Dict, Optional

from .amount import to_atoms
from .errors import ChainDataError
from .logging import get_logger
from .models import BlockHeader, FeeBlockStat, FeeWindowStat, StakeDifficulty, TicketFeeInfo
from .rpc import RPCClient

logger = get_logger(__name__)


def _require(obj: Dict[str, Any], key: str, what: str) -> Any:
    if not isinstance(obj, dict) or key not in obj:
        raise ChainDataError(f"{what} response missing {key!r}")
    return obj[key]


class ChainClient:
    """
    Typed view over the daemon RPCs consumed by the fee estimators.

    Fee statistics are passed through in coins, exactly as reported, so the
    estimators decide which field to convert. Difficulties are converted to
    atoms here.
    """

    def __init__(self, rpc_client: RPCClient):
        self.rpc_client = rpc_client

    def ticket_fee_info(self, blocks: Optional[int] = None,
                        windows: Optional[int] = None) -> TicketFeeInfo:
        """
        Fetch ticket fee statistics for recent blocks and/or difficulty windows.

        Args:
            blocks: Number of recent blocks to report (None or 0 omits the section)
            windows: Number of recent difficulty windows (None or 0 omits the section)

        Returns:
            TicketFeeInfo with the requested sections populated
        """
        raw = self.rpc_client.call("ticketfeeinfo", blocks or 0, windows or 0)
        if not isinstance(raw, dict):
            raise ChainDataError(f"ticketfeeinfo returned {type(raw).__name__}, expected object")

        fee_blocks = [
            FeeBlockStat(
                mean_fee=_require(b, "mean", "ticketfeeinfo block"),
                median_fee=_require(b, "median", "ticketfeeinfo block"),
                height=b.get("height"),
            )
            for b in raw.get("feeinfoblocks") or []
        ]
        fee_windows = [
            FeeWindowStat(
                start_height=int(_require(w, "startheight", "ticketfeeinfo window")),
                end_height=int(_require(w, "endheight", "ticketfeeinfo window")),
                mean_fee=_require(w, "mean", "ticketfeeinfo window"),
                median_fee=_require(w, "median", "ticketfeeinfo window"),
            )
            for w in raw.get("feeinfowindows") or []
        ]
        return TicketFeeInfo(fee_info_blocks=fee_blocks, fee_info_windows=fee_windows)

    def get_block_hash(self, height: int) -> str:
        return self.rpc_client.call("getblockhash", int(height))

    def get_block_header(self, block_hash: str) -> BlockHeader:
        raw = self.rpc_client.call("getblockheader", block_hash, True)
        return BlockHeader(
            hash=raw.get("hash", block_hash) if isinstance(raw, dict) else block_hash,
            height=int(_require(raw, "height", "getblockheader")),
            sbits=to_atoms(_require(raw, "sbits", "getblockheader")),
        )

    def get_stake_difficulty(self) -> StakeDifficulty:
        """Current and next-window stake difficulty, in atoms."""
        raw = self.rpc_client.call("getstakedifficulty")
        return StakeDifficulty(
            current=to_atoms(_require(raw, "current", "getstakedifficulty")),
            next=to_atoms(_require(raw, "next", "getstakedifficulty")),
        )
