"""Tests for the recent block and difficulty window fee estimators."""

from unittest.mock import Mock

import pytest

from ticketfee.amount import AmountError
from ticketfee.chain import ChainClient
from ticketfee.errors import InsufficientDataError, RPCError
from ticketfee.fees import FeeEstimate, RecentBlockFeeEstimator, WindowFeeEstimator
from ticketfee.models import BlockHeader, FeeBlockStat, FeeWindowStat, TicketFeeInfo

WINDOW_SIZE = 144


def coins(atoms):
    """Express atoms the way the daemon reports them."""
    return atoms / 1e8


def window(start, fee, median=None, span=WINDOW_SIZE):
    return FeeWindowStat(
        start_height=start,
        end_height=start + span,
        mean_fee=coins(fee),
        median_fee=coins(fee if median is None else median),
    )


def make_chain(windows, difficulties):
    """Chain mock whose block at each window start has the given stake difficulty."""
    chain = Mock(spec=ChainClient)
    chain.ticket_fee_info.return_value = TicketFeeInfo(fee_info_windows=windows)
    chain.get_block_hash.side_effect = lambda height: f"hash-{height}"
    chain.get_block_header.side_effect = lambda h: BlockHeader(
        hash=h, height=int(h.split("-")[1]), sbits=difficulties[int(h.split("-")[1])]
    )
    return chain


def test_window_estimate_picks_closest_difficulty():
    """Test that the fee comes from the window nearest the target difficulty."""
    windows = [window(1440, 300), window(1296, 200), window(1152, 100)]
    chain = make_chain(windows, {1440: 5000, 1296: 2100, 1152: 900})

    estimate = WindowFeeEstimator(chain, WINDOW_SIZE).estimate(2000)

    assert estimate == FeeEstimate(fee=200, source="windows")
    assert estimate.has_signal
    chain.ticket_fee_info.assert_called_once_with(blocks=0, windows=20)


def test_window_estimate_tie_goes_to_first_window():
    """Test that equal differences resolve to the earliest window."""
    windows = [window(1440, 111), window(1296, 222), window(1152, 333)]
    chain = make_chain(windows, {1440: 1100, 1296: 900, 1152: 5000})

    assert WindowFeeEstimator(chain, WINDOW_SIZE).estimate(1000).fee == 111


def test_window_exact_match_beats_any_fee():
    """Test that a zero difference wins regardless of fee magnitude."""
    windows = [window(1440, 999_999), window(1296, 5)]
    chain = make_chain(windows, {1440: 1001, 1296: 1000})

    assert WindowFeeEstimator(chain, WINDOW_SIZE).estimate(1000).fee == 5


def test_window_rank_orders_by_difference():
    """Test the full ranking produced for a target."""
    windows = [window(1440, 1), window(1296, 2), window(1152, 3)]
    chain = make_chain(windows, {1440: 1500, 1296: 1020, 1152: 800})

    ranked = WindowFeeEstimator(chain, WINDOW_SIZE).rank_windows(1000)

    assert [r.fee for r in ranked] == [2, 3, 1]
    assert [r.difference for r in ranked] == [20, 200, 500]
    assert ranked[0].difficulty == 1020


def test_partial_first_window_skipped():
    """Test that an incomplete first window is ignored without any lookups."""
    windows = [window(1440, 50, span=10), window(1296, 70)]
    chain = make_chain(windows, {1440: 1000, 1296: 4000})

    estimate = WindowFeeEstimator(chain, WINDOW_SIZE).estimate(1000)

    assert estimate.fee == 70
    chain.get_block_hash.assert_called_once_with(1296)


def test_partial_window_only_skipped_in_first_position():
    """Test that a short window later in the list is still considered."""
    windows = [window(1440, 50), window(1296, 70, span=10)]
    chain = make_chain(windows, {1440: 4000, 1296: 1000})

    assert WindowFeeEstimator(chain, WINDOW_SIZE).estimate(1000).fee == 70


def test_zero_fee_windows_skipped():
    """Test that windows without ticket purchases are ignored."""
    windows = [window(1440, 0), window(1296, 40)]
    chain = make_chain(windows, {1440: 1000, 1296: 9000})

    assert WindowFeeEstimator(chain, WINDOW_SIZE).estimate(1000).fee == 40


def test_all_windows_filtered_returns_no_signal():
    """Test that no surviving window gives a zero fee rather than an error."""
    windows = [window(1440, 50, span=3), window(1296, 0), window(1152, 0)]
    chain = make_chain(windows, {1440: 1000, 1296: 1000, 1152: 1000})

    estimate = WindowFeeEstimator(chain, WINDOW_SIZE).estimate(1000)

    assert estimate.fee == 0
    assert not estimate.has_signal


def test_no_windows_raises_insufficient_data():
    """Test that an empty window list is an error."""
    chain = make_chain([], {})

    with pytest.raises(InsufficientDataError):
        WindowFeeEstimator(chain, WINDOW_SIZE).estimate(1000)


def test_window_uses_median_when_requested():
    """Test median fee selection."""
    windows = [window(1440, 100, median=80)]
    chain = make_chain(windows, {1440: 1000})

    assert WindowFeeEstimator(chain, WINDOW_SIZE).estimate(1000, use_median=True).fee == 80


def test_header_failure_aborts_estimate():
    """Test that a lookup failure after successful windows propagates."""
    windows = [window(1440, 100), window(1296, 200), window(1152, 300)]
    chain = make_chain(windows, {1440: 1000, 1296: 1000, 1152: 1000})
    chain.get_block_header.side_effect = [
        BlockHeader(hash="hash-1440", height=1440, sbits=1000),
        RPCError("getblockheader", "block not found", code=-5),
    ]

    with pytest.raises(RPCError):
        WindowFeeEstimator(chain, WINDOW_SIZE).estimate(1000)


def test_block_hash_failure_aborts_estimate():
    """Test that a block hash lookup failure propagates."""
    chain = make_chain([window(1440, 100)], {1440: 1000})
    chain.get_block_hash.side_effect = RPCError("getblockhash", "out of range")

    with pytest.raises(RPCError):
        WindowFeeEstimator(chain, WINDOW_SIZE).estimate(1000)


def test_malformed_window_fee_aborts_estimate():
    """Test that unparsable fee values are treated like query failures."""
    bad = FeeWindowStat(start_height=1440, end_height=1584, mean_fee=float("nan"), median_fee=0.0)
    chain = make_chain([bad], {1440: 1000})

    with pytest.raises(AmountError):
        WindowFeeEstimator(chain, WINDOW_SIZE).estimate(1000)


def test_windows_to_consider_is_configurable():
    """Test that the window count is injected at construction."""
    chain = make_chain([window(1440, 10)], {1440: 1000})

    WindowFeeEstimator(chain, WINDOW_SIZE, windows_to_consider=5).estimate(1000)

    chain.ticket_fee_info.assert_called_once_with(blocks=0, windows=5)


def block_chain(means, medians=None):
    chain = Mock(spec=ChainClient)
    medians = medians or means
    chain.ticket_fee_info.return_value = TicketFeeInfo(fee_info_blocks=[
        FeeBlockStat(mean_fee=coins(m), median_fee=coins(d)) for m, d in zip(means, medians)
    ])
    return chain


def test_recent_blocks_average():
    """Test mean fee averaging over recent blocks."""
    chain = block_chain([10, 20, 30])

    estimate = RecentBlockFeeEstimator(chain).estimate(3)

    assert estimate == FeeEstimate(fee=20, source="blocks")
    chain.ticket_fee_info.assert_called_once_with(blocks=3, windows=None)


def test_recent_blocks_divides_by_requested_count():
    """Test that a short result is still divided by the requested block count."""
    chain = block_chain([10, 20, 30])

    assert RecentBlockFeeEstimator(chain).estimate(5).fee == 12


def test_recent_blocks_median():
    """Test median fee averaging."""
    chain = block_chain([10, 20, 30], medians=[40, 50, 60])

    assert RecentBlockFeeEstimator(chain).estimate(3, use_median=True).fee == 50


def test_recent_blocks_without_fees_has_no_signal():
    """Test that blocks without ticket fees give a no-signal estimate."""
    chain = block_chain([0, 0, 0])

    estimate = RecentBlockFeeEstimator(chain).estimate(3)

    assert estimate.fee == 0
    assert not estimate.has_signal


def test_recent_blocks_malformed_fee_raises():
    """Test that a malformed block fee aborts the average."""
    chain = Mock(spec=ChainClient)
    chain.ticket_fee_info.return_value = TicketFeeInfo(fee_info_blocks=[
        FeeBlockStat(mean_fee=0.0001, median_fee=0.0001),
        FeeBlockStat(mean_fee="abc", median_fee=0.0001),
    ])

    with pytest.raises(AmountError):
        RecentBlockFeeEstimator(chain).estimate(2)


def test_recent_blocks_query_failure_propagates():
    """Test that a ticketfeeinfo failure propagates."""
    chain = Mock(spec=ChainClient)
    chain.ticket_fee_info.side_effect = RPCError("ticketfeeinfo", "daemon busy")

    with pytest.raises(RPCError):
        RecentBlockFeeEstimator(chain).estimate(3)


def test_recent_blocks_rejects_non_positive_count():
    chain = block_chain([10])

    with pytest.raises(ValueError):
        RecentBlockFeeEstimator(chain).estimate(0)
    chain.ticket_fee_info.assert_not_called()
