"""Network parameters consumed by the fee estimators."""

from dataclasses import dataclass
from typing import Dict


@dataclass(frozen=True)
class NetParams:
    """Subset of chain parameters relevant to ticket fee estimation."""
    name: str
    stake_diff_window_size: int  # blocks per stake difficulty adjustment period


NETWORKS: Dict[str, NetParams] = {
    "mainnet": NetParams(name="mainnet", stake_diff_window_size=144),
    "testnet": NetParams(name="testnet", stake_diff_window_size=144),
    "simnet": NetParams(name="simnet", stake_diff_window_size=8),
}


def get_network(name: str) -> NetParams:
    """
    Look up network parameters by name.

    Raises:
        ValueError: If the network is unknown
    """
    try:
        return NETWORKS[name.lower()]
    except KeyError:
        raise ValueError(
            f"Unknown network {name!r} (expected one of: {', '.join(NETWORKS)})"
        ) from None
