import pytest

from dloom.accounts import Mint, TokenAccount, mint_to
from dloom.amm_liquidity import (
    claim_lp_fees,
    reinvest_lp_fees,
    remove_amm_liquidity,
    update_fee_preference,
)
from dloom.amm_pool import create_amm_pool, open_amm_position
from dloom.amm_state import FeePreference
from dloom.constants import PRECISION
from dloom.errors import DloomError, ErrorCode

OWNER = "owner"


@pytest.fixture
def pool():
    accounts, _ = create_amm_pool(
        "admin", Mint("mint_a", decimals=6), Mint("mint_b", decimals=6), 30, 1000, 0
    )
    accounts.token_a_vault.amount = 10_000
    accounts.token_b_vault.amount = 40_000
    accounts.state.reserves_a = 10_000
    accounts.state.reserves_b = 40_000
    return accounts


@pytest.fixture
def user_lp(pool):
    account = TokenAccount("user_lp", pool.lp_mint.address, OWNER)
    mint_to(pool.lp_mint, account, 20_000)
    return account


@pytest.fixture
def user_a():
    return TokenAccount("user_a", "mint_a", OWNER)


@pytest.fixture
def user_b():
    return TokenAccount("user_b", "mint_b", OWNER)


@pytest.fixture
def position(pool, user_lp):
    pos = open_amm_position(pool, OWNER, FeePreference.MANUAL_CLAIM)
    pos.lp_token_amount = user_lp.amount
    return pos


def test_claim_pays_fees_and_reduces_reserves(pool, position, user_a, user_b):
    pool.state.fee_growth_per_lp_token_a = PRECISION // 10
    pool.state.fee_growth_per_lp_token_b = PRECISION // 20
    event = claim_lp_fees(pool, position, OWNER, user_a, user_b)
    assert event.fees_claimed_a == 2000
    assert user_a.amount == event.fees_claimed_a
    assert user_b.amount == event.fees_claimed_b
    assert pool.state.reserves_a == 10_000 - event.fees_claimed_a
    assert pool.token_b_vault.amount == 40_000 - event.fees_claimed_b
    assert position.fee_growth_snapshot_a == pool.state.fee_growth_per_lp_token_a
    assert position.fee_growth_snapshot_b == pool.state.fee_growth_per_lp_token_b


def test_second_claim_pays_nothing(pool, position, user_a, user_b):
    pool.state.fee_growth_per_lp_token_a = PRECISION // 10
    claim_lp_fees(pool, position, OWNER, user_a, user_b)
    before = user_a.amount
    event = claim_lp_fees(pool, position, OWNER, user_a, user_b)
    assert (event.fees_claimed_a, event.fees_claimed_b) == (0, 0)
    assert user_a.amount == before


def test_snapshot_ahead_of_growth_yields_zero(pool, position, user_a, user_b):
    position.fee_growth_snapshot_a = PRECISION
    pool.state.fee_growth_per_lp_token_a = PRECISION // 2
    event = claim_lp_fees(pool, position, OWNER, user_a, user_b)
    assert event.fees_claimed_a == 0
    assert position.fee_growth_snapshot_a == PRECISION // 2


def test_claim_rejects_other_owner(pool, position, user_a, user_b):
    with pytest.raises(PermissionError):
        claim_lp_fees(pool, position, "intruder", user_a, user_b)


def test_claim_rejects_position_of_other_pool(pool, position, user_a, user_b):
    position.pool = "elsewhere"
    with pytest.raises(DloomError) as info:
        claim_lp_fees(pool, position, OWNER, user_a, user_b)
    assert info.value.code is ErrorCode.INVALID_POOL


def test_claim_beyond_reserves_overflows_without_changes(pool, position, user_a, user_b):
    pool.state.reserves_a = 100
    pool.state.fee_growth_per_lp_token_a = PRECISION // 10
    with pytest.raises(DloomError) as info:
        claim_lp_fees(pool, position, OWNER, user_a, user_b)
    assert info.value.code is ErrorCode.MATH_OVERFLOW
    assert user_a.amount == 0
    assert position.fee_growth_snapshot_a == 0


def test_reinvest_requires_auto_compound(pool, position, user_lp):
    with pytest.raises(DloomError) as info:
        reinvest_lp_fees(pool, position, OWNER, user_lp)
    assert info.value.code is ErrorCode.INVALID_FEE_PREFERENCE


def test_reinvest_mints_lp_tokens(pool, position, user_lp):
    position.fee_preference = FeePreference.AUTO_COMPOUND
    pool.state.fee_growth_per_lp_token_a = PRECISION // 20
    pool.state.fee_growth_per_lp_token_b = PRECISION // 5
    minted = reinvest_lp_fees(pool, position, OWNER, user_lp)
    assert minted == 2000
    assert user_lp.amount == 20_000 + minted
    assert position.lp_token_amount == user_lp.amount
    assert pool.lp_mint.supply == user_lp.amount
    assert pool.state.reserves_a == 10_000
    assert position.fee_growth_snapshot_b == pool.state.fee_growth_per_lp_token_b


def test_reinvest_without_fees_mints_nothing(pool, position, user_lp):
    position.fee_preference = FeePreference.AUTO_COMPOUND
    assert reinvest_lp_fees(pool, position, OWNER, user_lp) == 0
    assert user_lp.amount == 20_000
    assert pool.lp_mint.supply == 20_000


def test_reinvest_rejects_wrong_lp_account(pool, position):
    position.fee_preference = FeePreference.AUTO_COMPOUND
    wrong = TokenAccount("wrong", "mint_a", OWNER)
    with pytest.raises(DloomError) as info:
        reinvest_lp_fees(pool, position, OWNER, wrong)
    assert info.value.code is ErrorCode.INVALID_MINT


def test_remove_liquidity_returns_share(pool, position, user_lp, user_a, user_b):
    event = remove_amm_liquidity(
        pool, position, OWNER, user_lp, user_a, user_b, 10_000, 0, 0, 1234
    )
    assert event.amount_a_received == 5000
    assert event.amount_a_received + pool.state.reserves_a == 10_000
    assert event.amount_b_received + pool.state.reserves_b == 40_000
    assert user_a.amount == event.amount_a_received
    assert user_b.amount == event.amount_b_received
    assert pool.token_a_vault.amount == pool.state.reserves_a
    assert user_lp.amount == 10_000
    assert pool.lp_mint.supply == 10_000
    assert position.lp_token_amount == 10_000
    assert pool.state.last_update_timestamp == 1234


def test_remove_liquidity_slippage(pool, position, user_lp, user_a, user_b):
    with pytest.raises(DloomError) as info:
        remove_amm_liquidity(
            pool, position, OWNER, user_lp, user_a, user_b, 10_000, 10_000, 0, 1
        )
    assert info.value.code is ErrorCode.SLIPPAGE_EXCEEDED
    assert user_lp.amount == 20_000
    assert pool.state.reserves_a == 10_000


def test_remove_more_than_position_holds(pool, position, user_lp, user_a, user_b):
    position.lp_token_amount = 100
    with pytest.raises(DloomError) as info:
        remove_amm_liquidity(pool, position, OWNER, user_lp, user_a, user_b, 1000, 0, 0, 1)
    assert info.value.code is ErrorCode.MATH_OVERFLOW
    assert user_lp.amount == 20_000


def test_remove_rejects_other_owner(pool, position, user_lp, user_a, user_b):
    with pytest.raises(PermissionError):
        remove_amm_liquidity(pool, position, "intruder", user_lp, user_a, user_b, 1, 0, 0, 1)


def test_update_fee_preference(position):
    update_fee_preference(position, OWNER, FeePreference.AUTO_COMPOUND)
    assert position.fee_preference is FeePreference.AUTO_COMPOUND


def test_update_fee_preference_rejects_other_owner(position):
    with pytest.raises(PermissionError):
        update_fee_preference(position, "intruder", FeePreference.AUTO_COMPOUND)
    assert position.fee_preference is FeePreference.MANUAL_CLAIM