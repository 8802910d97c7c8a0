"""Depositing liquidity into a range of DLMM bins."""

from dloom.accounts import transfer
from dloom.constants import I32_MAX, I32_MIN, U64_MAX, U128_MAX
from dloom.dlmm_math import calculate_required_for_bin, validated_bin_map
from dloom.dlmm_state import bin_address
from dloom.errors import DloomError, ErrorCode
from dloom.events import DlmmLiquidityUpdate


def _checked_u128(value):
    if not 0 <= value <= U128_MAX:
        raise DloomError(ErrorCode.MATH_OVERFLOW)
    return value


def _checked_u64(value):
    if not 0 <= value <= U64_MAX:
        raise DloomError(ErrorCode.MATH_OVERFLOW)
    return value


def _next_bin(bin_id, step):
    moved = bin_id + step
    if not I32_MIN <= moved <= I32_MAX:
        raise DloomError(ErrorCode.MATH_OVERFLOW)
    return moved


def _check_user_account(account, mint, owner):
    if account.mint != mint:
        raise DloomError(ErrorCode.INVALID_MINT)
    if account.owner != owner:
        raise PermissionError("token account is not owned by the signer")


def dlmm_add_liquidity(
    pool,
    position,
    owner,
    transaction_bins,
    bins,
    user_token_a,
    user_token_b,
    start_bin_id,
    liquidity_per_bin,
):
    """Add ``liquidity_per_bin`` to each cached bin, starting at ``start_bin_id``.

    The cached bins must be consecutive (by the pool's bin step) and inside the
    position's range. Nothing changes unless the whole deposit succeeds. Returns
    a DlmmLiquidityUpdate event; the bin cache is spent afterwards.
    """
    state = pool.state
    if position.owner != owner:
        raise PermissionError("position is not owned by the signer")
    if position.pool != state.address:
        raise DloomError(ErrorCode.INVALID_POOL)
    if transaction_bins.owner != owner:
        raise PermissionError("bin cache is not owned by the signer")
    _check_user_account(user_token_a, state.token_a_mint, owner)
    _check_user_account(user_token_b, state.token_b_mint, owner)

    if liquidity_per_bin <= 0:
        raise DloomError(ErrorCode.ZERO_LIQUIDITY)

    provided = validated_bin_map(transaction_bins, bins)

    bin_ids = []
    current = start_bin_id
    total_a = total_b = 0
    for _ in transaction_bins.bins:
        if not position.lower_bin_id <= current <= position.upper_bin_id:
            raise DloomError(ErrorCode.INVALID_BIN_RANGE)
        required_a, required_b = calculate_required_for_bin(
            state.active_bin_id, current, state.bin_step, liquidity_per_bin
        )
        total_a = _checked_u128(total_a + required_a)
        total_b = _checked_u128(total_b + required_b)
        bin_ids.append(current)
        current = _next_bin(current, state.bin_step)

    amount_a = total_a & U64_MAX
    amount_b = total_b & U64_MAX
    if total_a > 0 and user_token_a.amount < amount_a:
        raise ValueError("insufficient funds")
    if total_b > 0 and user_token_b.amount < amount_b:
        raise ValueError("insufficient funds")
    new_reserves_a = _checked_u64(state.reserves_a + amount_a) if total_a > 0 else state.reserves_a
    new_reserves_b = _checked_u64(state.reserves_b + amount_b) if total_b > 0 else state.reserves_b

    new_liquidity = {}
    for address, bin_id in zip(transaction_bins.bins, bin_ids):
        if address != bin_address(state.address, bin_id):
            raise DloomError(ErrorCode.INVALID_BIN_ACCOUNT)
        current_liquidity = new_liquidity.get(address, provided[address].liquidity)
        new_liquidity[address] = _checked_u128(current_liquidity + liquidity_per_bin)

    total_added = _checked_u128(liquidity_per_bin * len(transaction_bins.bins))
    new_position_liquidity = _checked_u128(position.liquidity + total_added)

    if total_a > 0:
        transfer(user_token_a, pool.token_a_vault, amount_a)
    if total_b > 0:
        transfer(user_token_b, pool.token_b_vault, amount_b)
    state.reserves_a = new_reserves_a
    state.reserves_b = new_reserves_b
    for address, liquidity in new_liquidity.items():
        provided[address].liquidity = liquidity
    position.liquidity = new_position_liquidity

    return DlmmLiquidityUpdate(
        position_address=position.address,
        liquidity_added=total_added,
        amount_a=amount_a,
        amount_b=amount_b,
    )