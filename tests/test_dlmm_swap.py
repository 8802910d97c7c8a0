import pytest

from dloom.accounts import DlmmParameter, DlmmParameters, Mint, TokenAccount, TransactionBins
from dloom.constants import PRECISION
from dloom.dlmm_math import swap_a_to_b, swap_b_to_a
from dloom.dlmm_pool import create_dlmm_community_pool
from dloom.dlmm_state import Bin, bin_address
from dloom.dlmm_swap import dlmm_swap
from dloom.errors import DloomError, ErrorCode

OWNER = "alice"


def make_pool(fee_rate=0, protocol_share=0, referrer_share=0):
    params = DlmmParameters(
        authority="admin", community_parameters=[DlmmParameter(bin_step=1, fee_rate=fee_rate)]
    )
    pool, _ = create_dlmm_community_pool(
        params, OWNER, "admin", Mint("mint_a"), Mint("mint_b"),
        1, fee_rate, protocol_share, referrer_share, 0, 0,
    )
    pool.state.reserves_a = 100_000
    pool.state.reserves_b = 100_000
    pool.token_a_vault.amount = 100_000
    pool.token_b_vault.amount = 100_000
    return pool


def make_bins(pool, ids, liquidity=5000):
    bins = [Bin(address=bin_address(pool.address, i), liquidity=liquidity) for i in ids]
    cache = TransactionBins(owner=OWNER, bins=[b.address for b in bins])
    return bins, cache


def accounts(amount_in, a_to_b=True):
    src_mint, dst_mint = ("mint_a", "mint_b") if a_to_b else ("mint_b", "mint_a")
    source = TokenAccount(address="src", mint=src_mint, owner=OWNER, amount=amount_in)
    destination = TokenAccount(address="dst", mint=dst_mint, owner=OWNER)
    return source, destination


def test_a_to_b_matches_routing_math():
    pool = make_pool()
    bins, cache = make_bins(pool, [0, -1])
    source, destination = accounts(1000)
    event = dlmm_swap(pool, OWNER, cache, bins, source, destination, 1000, 0)

    ref_pool = make_pool()
    ref_bins, ref_cache = make_bins(ref_pool, [0, -1])
    out, fee, final = swap_a_to_b(ref_pool.state, 1000, ref_cache, ref_bins)

    assert (event.amount_out, event.protocol_fee, event.final_active_bin_id) == (out, fee, final)
    assert [b.liquidity for b in bins] == [b.liquidity for b in ref_bins]
    assert pool.state.active_bin_id == final
    assert destination.amount == out
    assert source.amount == 0
    assert pool.state.volatility_accumulator == abs(final)


def test_b_to_a_matches_routing_math():
    pool = make_pool()
    bins, cache = make_bins(pool, [0, 1])
    source, destination = accounts(1000, a_to_b=False)
    event = dlmm_swap(pool, OWNER, cache, bins, source, destination, 1000, 0)

    ref_pool = make_pool()
    ref_bins, ref_cache = make_bins(ref_pool, [0, 1])
    out, fee, final = swap_b_to_a(ref_pool.state, 1000, ref_cache, ref_bins)

    assert (event.amount_out, event.final_active_bin_id) == (out, final)
    assert bins[0].liquidity == ref_bins[0].liquidity
    assert pool.state.reserves_a == 100_000 - out
    assert pool.state.reserves_b == 100_000 + 1000 - fee
    assert event.input_mint == "mint_b"


def test_referrer_with_wrong_mint_is_rejected():
    pool = make_pool()
    bins, cache = make_bins(pool, [0])
    source, destination = accounts(1000)
    referrer = TokenAccount(address="ref", mint="mint_b", owner="bob")
    with pytest.raises(DloomError) as info:
        dlmm_swap(pool, OWNER, cache, bins, source, destination, 1000, 0, referrer)
    assert info.value.code is ErrorCode.INVALID_MINT


def test_slippage_leaves_everything_untouched():
    pool = make_pool()
    bins, cache = make_bins(pool, [0])
    source, destination = accounts(1000)
    with pytest.raises(DloomError) as info:
        dlmm_swap(pool, OWNER, cache, bins, source, destination, 1000, 1001)
    assert info.value.code is ErrorCode.SLIPPAGE_EXCEEDED
    assert bins[0].liquidity == 5000
    assert source.amount == 1000
    assert pool.state.active_bin_id == 0


def test_missing_bin_account_is_rejected():
    pool = make_pool()
    bins, cache = make_bins(pool, [0, -1])
    source, destination = accounts(1000)
    with pytest.raises(DloomError) as info:
        dlmm_swap(pool, OWNER, cache, bins[:1], source, destination, 1000, 0)
    assert info.value.code is ErrorCode.BIN_CACHE_MISMATCH


def test_not_enough_liquidity():
    pool = make_pool()
    bins, cache = make_bins(pool, [0], liquidity=10)
    source, destination = accounts(1000)
    with pytest.raises(DloomError) as info:
        dlmm_swap(pool, OWNER, cache, bins, source, destination, 1000, 0)
    assert info.value.code is ErrorCode.INSUFFICIENT_LIQUIDITY_FOR_SWAP
    assert bins[0].fee_growth_per_unit_b == 0


def test_foreign_source_mint_is_rejected():
    pool = make_pool()
    bins, cache = make_bins(pool, [0])
    source = TokenAccount(address="src", mint="mint_c", owner=OWNER, amount=1000)
    destination = TokenAccount(address="dst", mint="mint_a", owner=OWNER)
    with pytest.raises(DloomError) as info:
        dlmm_swap(pool, OWNER, cache, bins, source, destination, 1000, 0)
    assert info.value.code is ErrorCode.INVALID_MINT


def test_cache_of_another_owner_is_rejected():
    pool = make_pool()
    bins, cache = make_bins(pool, [0])
    cache.owner = "mallory"
    source, destination = accounts(1000)
    with pytest.raises(PermissionError):
        dlmm_swap(pool, OWNER, cache, bins, source, destination, 1000, 0)


def test_price_scale_used_at_origin_bin():
    pool = make_pool()
    bins, cache = make_bins(pool, [0], liquidity=PRECISION)
    source, destination = accounts(1000)
    event = dlmm_swap(pool, OWNER, cache, bins, source, destination, 1000, 0)
    assert event.amount_out == 1000