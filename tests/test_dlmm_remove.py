import pytest

from dloom.accounts import DlmmParameter, DlmmParameters, Mint, TokenAccount, TransactionBins
from dloom.constants import PRECISION
from dloom.dlmm_math import calculate_accrued_fees, calculate_claimable_amounts
from dloom.dlmm_pool import create_dlmm_community_pool
from dloom.dlmm_remove import dlmm_remove_liquidity
from dloom.dlmm_state import Bin, Position, bin_address
from dloom.errors import DloomError, ErrorCode

OWNER = "alice"


def make_setup(fee_growth_b=0):
    params = DlmmParameters(
        authority="admin", community_parameters=[DlmmParameter(bin_step=1, fee_rate=0)]
    )
    pool, _ = create_dlmm_community_pool(
        params, OWNER, "admin", Mint("mint_a"), Mint("mint_b"), 1, 0, 0, 0, 1, 0
    )
    pool.state.reserves_a = 1_000_000
    pool.state.reserves_b = 1_000_000
    pool.token_a_vault.amount = 1_000_000
    pool.token_b_vault.amount = 1_000_000
    bins = [
        Bin(address=bin_address(pool.address, i), liquidity=1000, fee_growth_per_unit_b=fee_growth_b)
        for i in range(3)
    ]
    cache = TransactionBins(owner=OWNER, bins=[b.address for b in bins])
    position = Position(
        address="position-1", pool=pool.address, owner=OWNER,
        lower_bin_id=0, upper_bin_id=2, liquidity=3000,
    )
    user_a = TokenAccount(address="ua", mint="mint_a", owner=OWNER)
    user_b = TokenAccount(address="ub", mint="mint_b", owner=OWNER)
    return pool, bins, cache, position, user_a, user_b


def test_remove_pays_principal():
    pool, bins, cache, position, user_a, user_b = make_setup()
    expected_a, expected_b = calculate_claimable_amounts(pool.state, position, 3000)
    event = dlmm_remove_liquidity(pool, position, OWNER, cache, bins, user_a, user_b, 3000, 0, 0)

    assert (event.amount_a, event.amount_b) == (expected_a, expected_b)
    assert (user_a.amount, user_b.amount) == (expected_a, expected_b)
    assert event.liquidity_added == -3000
    assert position.liquidity == 0
    assert pool.state.reserves_a == 1_000_000 - expected_a
    assert pool.token_b_vault.amount == 1_000_000 - expected_b
    assert [b.liquidity for b in bins] == [1000, 1000, 1000]


def test_remove_includes_fees_and_updates_snapshots():
    pool, bins, cache, position, user_a, user_b = make_setup(fee_growth_b=2 * PRECISION)
    principal_a, principal_b = calculate_claimable_amounts(pool.state, position, 1500)
    fee_b = sum(calculate_accrued_fees(position, b)[1] for b in bins)
    event = dlmm_remove_liquidity(pool, position, OWNER, cache, bins, user_a, user_b, 1500, 0, 0)

    assert fee_b > 0
    assert event.amount_a == principal_a
    assert event.amount_b == principal_b + fee_b
    assert position.liquidity == 1500
    assert position.fee_growth_snapshot_b == 2 * PRECISION
    assert calculate_accrued_fees(position, bins[0]) == (0, 0)


def test_zero_liquidity_rejected():
    pool, bins, cache, position, user_a, user_b = make_setup()
    with pytest.raises(DloomError) as info:
        dlmm_remove_liquidity(pool, position, OWNER, cache, bins, user_a, user_b, 0, 0, 0)
    assert info.value.code is ErrorCode.ZERO_LIQUIDITY


def test_more_than_position_rejected():
    pool, bins, cache, position, user_a, user_b = make_setup()
    with pytest.raises(DloomError) as info:
        dlmm_remove_liquidity(pool, position, OWNER, cache, bins, user_a, user_b, 3001, 0, 0)
    assert info.value.code is ErrorCode.INSUFFICIENT_LIQUIDITY


def test_other_owner_rejected():
    pool, bins, cache, position, user_a, user_b = make_setup()
    position.owner = "mallory"
    with pytest.raises(DloomError) as info:
        dlmm_remove_liquidity(pool, position, OWNER, cache, bins, user_a, user_b, 100, 0, 0)
    assert info.value.code is ErrorCode.UNAUTHORIZED


def test_bins_out_of_order_rejected():
    pool, bins, cache, position, user_a, user_b = make_setup()
    cache.bins.reverse()
    with pytest.raises(DloomError) as info:
        dlmm_remove_liquidity(pool, position, OWNER, cache, bins, user_a, user_b, 100, 0, 0)
    assert info.value.code is ErrorCode.INVALID_BIN_ACCOUNT
    assert position.liquidity == 3000


def test_missing_bin_rejected():
    pool, bins, cache, position, user_a, user_b = make_setup()
    with pytest.raises(DloomError) as info:
        dlmm_remove_liquidity(pool, position, OWNER, cache, bins[:2], user_a, user_b, 100, 0, 0)
    assert info.value.code is ErrorCode.BIN_CACHE_MISMATCH


def test_slippage_leaves_state_untouched():
    pool, bins, cache, position, user_a, user_b = make_setup()
    expected_a, _ = calculate_claimable_amounts(pool.state, position, 3000)
    with pytest.raises(DloomError) as info:
        dlmm_remove_liquidity(
            pool, position, OWNER, cache, bins, user_a, user_b, 3000, expected_a + 1, 0
        )
    assert info.value.code is ErrorCode.SLIPPAGE_EXCEEDED
    assert position.liquidity == 3000
    assert user_a.amount == 0
    assert pool.state.reserves_a == 1_000_000


def test_wrong_token_mint_rejected():
    pool, bins, cache, position, user_a, user_b = make_setup()
    with pytest.raises(DloomError) as info:
        dlmm_remove_liquidity(pool, position, OWNER, cache, bins, user_b, user_a, 100, 0, 0)
    assert info.value.code is ErrorCode.INVALID_MINT