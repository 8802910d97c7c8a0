"""Withdrawing liquidity and accrued fees from a DLMM position."""

from dloom.accounts import transfer
from dloom.constants import I32_MAX, I32_MIN, U64_MAX
from dloom.dlmm_math import calculate_accrued_fees, calculate_claimable_amounts, validated_bin_map
from dloom.dlmm_state import bin_address
from dloom.errors import DloomError, ErrorCode
from dloom.events import DlmmLiquidityUpdate


def _checked_u64(value):
    if not 0 <= value <= U64_MAX:
        raise DloomError(ErrorCode.MATH_OVERFLOW)
    return value


def _check_user_account(account, mint, owner):
    if account.mint != mint:
        raise DloomError(ErrorCode.INVALID_MINT)
    if account.owner != owner:
        raise PermissionError("token account is not owned by the signer")


def _require_funds(account, amount):
    if account.amount < amount:
        raise ValueError("insufficient funds")


def dlmm_remove_liquidity(
    pool,
    position,
    owner,
    transaction_bins,
    bins,
    user_token_a,
    user_token_b,
    liquidity_to_remove,
    min_amount_a,
    min_amount_b,
):
    """Withdraw principal plus fees for ``liquidity_to_remove``; returns DlmmLiquidityUpdate.

    The cached bins must be the position's bins in ascending order from its
    lower bin. Nothing changes unless the whole withdrawal succeeds.
    """
    state = pool.state
    if position.owner != owner:
        raise DloomError(ErrorCode.UNAUTHORIZED)
    if transaction_bins.owner != owner:
        raise PermissionError("bin cache is not owned by the signer")
    _check_user_account(user_token_a, state.token_a_mint, owner)
    _check_user_account(user_token_b, state.token_b_mint, owner)

    if liquidity_to_remove <= 0:
        raise DloomError(ErrorCode.ZERO_LIQUIDITY)
    if liquidity_to_remove > position.liquidity:
        raise DloomError(ErrorCode.INSUFFICIENT_LIQUIDITY)

    provided = validated_bin_map(transaction_bins, bins)
    principal_a, principal_b = calculate_claimable_amounts(state, position, liquidity_to_remove)

    fees_a = fees_b = 0
    growth_a = position.fee_growth_snapshot_a
    growth_b = position.fee_growth_snapshot_b
    current = position.lower_bin_id
    for address in transaction_bins.bins:
        if address != bin_address(state.address, current):
            raise DloomError(ErrorCode.INVALID_BIN_ACCOUNT)
        bin = provided[address]
        accrued_a, accrued_b = calculate_accrued_fees(position, bin)
        fees_a = _checked_u64(fees_a + accrued_a)
        fees_b = _checked_u64(fees_b + accrued_b)
        growth_a = max(growth_a, bin.fee_growth_per_unit_a)
        growth_b = max(growth_b, bin.fee_growth_per_unit_b)
        current += state.bin_step
        if not I32_MIN <= current <= I32_MAX:
            raise DloomError(ErrorCode.MATH_OVERFLOW)

    total_a = _checked_u64((principal_a & U64_MAX) + fees_a)
    total_b = _checked_u64((principal_b & U64_MAX) + fees_b)
    if total_a < min_amount_a or total_b < min_amount_b:
        raise DloomError(ErrorCode.SLIPPAGE_EXCEEDED)

    _require_funds(pool.token_a_vault, total_a)
    _require_funds(pool.token_b_vault, total_b)
    new_reserves_a = _checked_u64(state.reserves_a - total_a)
    new_reserves_b = _checked_u64(state.reserves_b - total_b)

    if total_a > 0:
        transfer(pool.token_a_vault, user_token_a, total_a)
    if total_b > 0:
        transfer(pool.token_b_vault, user_token_b, total_b)

    state.reserves_a = new_reserves_a
    state.reserves_b = new_reserves_b
    position.liquidity -= liquidity_to_remove
    position.fee_growth_snapshot_a = growth_a
    position.fee_growth_snapshot_b = growth_b

    return DlmmLiquidityUpdate(
        position_address=position.address,
        liquidity_added=-liquidity_to_remove,
        amount_a=total_a,
        amount_b=total_b,
    )