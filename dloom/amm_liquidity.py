"""Claiming, reinvesting and withdrawing liquidity-provider funds of AMM pools."""

from dloom.accounts import burn, mint_to, transfer
from dloom.amm_math import calculate_assets_to_withdraw, calculate_lp_tokens_to_mint
from dloom.amm_pool import update_oracle
from dloom.amm_state import FeePreference
from dloom.constants import PRECISION, U64_MAX, U128_MAX
from dloom.errors import DloomError, ErrorCode
from dloom.events import AmmFeesClaimed, AmmLiquidityRemoved


def _pending_fees(state, position):
    """Fees (a, b) a position has earned since its last snapshot."""

    def pending(growth, snapshot):
        delta = max(growth - snapshot, 0)
        product = delta * position.lp_token_amount
        if product > U128_MAX:
            return 0
        return (product // PRECISION) & U64_MAX

    return (
        pending(state.fee_growth_per_lp_token_a, position.fee_growth_snapshot_a),
        pending(state.fee_growth_per_lp_token_b, position.fee_growth_snapshot_b),
    )


def _require_owner(account, owner, what):
    if account.owner != owner:
        raise PermissionError(f"{what} is not owned by the signer")


def _require_position(pool, position, owner):
    _require_owner(position, owner, "position")
    if position.pool != pool.address:
        raise DloomError(ErrorCode.INVALID_POOL)


def _require_mint(account, mint_address):
    if account.mint != mint_address:
        raise DloomError(ErrorCode.INVALID_MINT)


def _require_funds(account, amount):
    if account.amount < amount:
        raise ValueError("insufficient funds")


def _reduced(value, amount):
    if amount > value:
        raise DloomError(ErrorCode.MATH_OVERFLOW)
    return value - amount


def claim_lp_fees(pool, position, owner, user_token_a, user_token_b):
    """Pay a position's accrued fees out of the pool; returns AmmFeesClaimed."""
    state = pool.state
    _require_position(pool, position, owner)
    _require_owner(user_token_a, owner, "token A account")
    _require_owner(user_token_b, owner, "token B account")
    _require_mint(user_token_a, state.token_a_mint)
    _require_mint(user_token_b, state.token_b_mint)

    fees_a, fees_b = _pending_fees(state, position)
    new_reserves_a = _reduced(state.reserves_a, fees_a)
    new_reserves_b = _reduced(state.reserves_b, fees_b)
    _require_funds(pool.token_a_vault, fees_a)
    _require_funds(pool.token_b_vault, fees_b)

    position.fee_growth_snapshot_a = state.fee_growth_per_lp_token_a
    position.fee_growth_snapshot_b = state.fee_growth_per_lp_token_b

    if fees_a > 0:
        transfer(pool.token_a_vault, user_token_a, fees_a)
    if fees_b > 0:
        transfer(pool.token_b_vault, user_token_b, fees_b)

    state.reserves_a = new_reserves_a
    state.reserves_b = new_reserves_b

    return AmmFeesClaimed(
        pool_address=state.address,
        user=owner,
        fees_claimed_a=fees_a,
        fees_claimed_b=fees_b,
    )


def reinvest_lp_fees(pool, position, owner, user_lp_account):
    """Turn a position's accrued fees into new LP tokens; returns the amount minted."""
    state = pool.state
    _require_position(pool, position, owner)
    _require_owner(user_lp_account, owner, "LP token account")
    _require_mint(user_lp_account, pool.lp_mint.address)
    if position.fee_preference is not FeePreference.AUTO_COMPOUND:
        raise DloomError(ErrorCode.INVALID_FEE_PREFERENCE)

    fees_a, fees_b = _pending_fees(state, position)
    _, _, minted = calculate_lp_tokens_to_mint(state, pool.lp_mint.supply, fees_a, fees_b)
    new_lp_amount = position.lp_token_amount + minted
    if new_lp_amount > U64_MAX:
        raise DloomError(ErrorCode.MATH_OVERFLOW)

    position.fee_growth_snapshot_a = state.fee_growth_per_lp_token_a
    position.fee_growth_snapshot_b = state.fee_growth_per_lp_token_b

    if minted == 0:
        return 0

    mint_to(pool.lp_mint, user_lp_account, minted)
    position.lp_token_amount = new_lp_amount
    return minted


def remove_amm_liquidity(
    pool,
    position,
    owner,
    user_lp_account,
    user_token_a,
    user_token_b,
    lp_tokens_to_burn,
    min_amount_a,
    min_amount_b,
    now,
):
    """Burn LP tokens for a share of the reserves; returns AmmLiquidityRemoved."""
    state = pool.state
    _require_position(pool, position, owner)
    _require_owner(user_lp_account, owner, "LP token account")
    _require_owner(user_token_a, owner, "token A account")
    _require_owner(user_token_b, owner, "token B account")
    _require_mint(user_lp_account, pool.lp_mint.address)
    _require_mint(user_token_a, state.token_a_mint)
    _require_mint(user_token_b, state.token_b_mint)

    amount_a, amount_b = calculate_assets_to_withdraw(
        state.reserves_a, state.reserves_b, pool.lp_mint.supply, lp_tokens_to_burn
    )
    if amount_a < min_amount_a or amount_b < min_amount_b:
        raise DloomError(ErrorCode.SLIPPAGE_EXCEEDED)

    _require_funds(pool.token_a_vault, amount_a)
    _require_funds(pool.token_b_vault, amount_b)
    _require_funds(user_lp_account, lp_tokens_to_burn)
    new_lp_amount = _reduced(position.lp_token_amount, lp_tokens_to_burn)
    new_reserves_a = _reduced(state.reserves_a, amount_a)
    new_reserves_b = _reduced(state.reserves_b, amount_b)

    update_oracle(state, now)

    if amount_a > 0:
        transfer(pool.token_a_vault, user_token_a, amount_a)
    if amount_b > 0:
        transfer(pool.token_b_vault, user_token_b, amount_b)
    burn(pool.lp_mint, user_lp_account, lp_tokens_to_burn)

    position.lp_token_amount = new_lp_amount
    state.reserves_a = new_reserves_a
    state.reserves_b = new_reserves_b

    return AmmLiquidityRemoved(
        pool_address=state.address,
        user=owner,
        lp_tokens_burned=lp_tokens_to_burn,
        amount_a_received=amount_a,
        amount_b_received=amount_b,
    )


def update_fee_preference(position, owner, new_preference):
    """Change how a position's fees are handled."""
    _require_owner(position, owner, "position")
    position.fee_preference = new_preference