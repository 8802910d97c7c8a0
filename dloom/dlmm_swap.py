"""Swapping through the bins of a DLMM pool."""

from dataclasses import replace

from dloom.accounts import transfer
from dloom.constants import BASIS_POINT_MAX, U64_MAX
from dloom.dlmm_math import swap_a_to_b, swap_b_to_a
from dloom.errors import DloomError, ErrorCode
from dloom.events import DlmmSwapResult


def _checked_u64(value):
    if not 0 <= value <= U64_MAX:
        raise DloomError(ErrorCode.MATH_OVERFLOW)
    return value


def _require_funds(account, amount):
    if account.amount < amount:
        raise ValueError("insufficient funds")


def dlmm_swap(
    pool,
    owner,
    transaction_bins,
    bins,
    source,
    destination,
    amount_in,
    min_amount_out,
    referrer=None,
):
    """Swap ``amount_in`` of the source token across the cached bins.

    Bins, balances and pool state change only if the whole swap succeeds.
    Returns a DlmmSwapResult event; the bin cache is spent afterwards.
    """
    state = pool.state
    if not 0 <= amount_in <= U64_MAX:
        raise ValueError(f"amount out of range: {amount_in}")
    if transaction_bins.owner != owner:
        raise PermissionError("bin cache is not owned by the signer")
    if source.owner != owner or destination.owner != owner:
        raise PermissionError("token account is not owned by the signer")
    if referrer is not None and referrer.mint != source.mint:
        raise DloomError(ErrorCode.INVALID_MINT)

    is_a_to_b = source.mint == state.token_a_mint
    if is_a_to_b:
        expected_destination_mint = state.token_b_mint
        source_vault, destination_vault = pool.token_a_vault, pool.token_b_vault
        fee_vault = pool.protocol_fee_vault_a
        route = swap_a_to_b
    else:
        if source.mint != state.token_b_mint:
            raise DloomError(ErrorCode.INVALID_MINT)
        expected_destination_mint = state.token_a_mint
        source_vault, destination_vault = pool.token_b_vault, pool.token_a_vault
        fee_vault = pool.protocol_fee_vault_b
        route = swap_b_to_a
    if destination.mint != expected_destination_mint:
        raise DloomError(ErrorCode.INVALID_MINT)

    initial_bin_id = state.active_bin_id
    working = [replace(bin) for bin in bins]
    amount_out, protocol_fee, final_bin_id = route(state, amount_in, transaction_bins, working)
    if amount_out < min_amount_out:
        raise DloomError(ErrorCode.SLIPPAGE_EXCEEDED)

    _require_funds(source, amount_in)
    _require_funds(destination_vault, amount_out)

    actual_protocol_fee = protocol_fee
    referral_fee = 0
    if protocol_fee > 0 and state.referrer_fee_share > 0 and referrer is not None:
        referral_fee = (protocol_fee * state.referrer_fee_share // BASIS_POINT_MAX) & U64_MAX
        if referral_fee > 0:
            actual_protocol_fee = _checked_u64(protocol_fee - referral_fee)

    bins_crossed = abs(final_bin_id - initial_bin_id)
    new_volatility = _checked_u64(state.volatility_accumulator + bins_crossed)
    for_lps = _checked_u64(amount_in - protocol_fee)
    if is_a_to_b:
        new_reserves_a = _checked_u64(state.reserves_a + for_lps)
        new_reserves_b = _checked_u64(state.reserves_b - amount_out)
    else:
        new_reserves_b = _checked_u64(state.reserves_b + for_lps)
        new_reserves_a = _checked_u64(state.reserves_a - amount_out)

    transfer(source, source_vault, amount_in)
    if referral_fee > 0:
        transfer(source_vault, referrer, referral_fee)
    if actual_protocol_fee > 0:
        transfer(source_vault, fee_vault, actual_protocol_fee)
    if amount_out > 0:
        transfer(destination_vault, destination, amount_out)

    for original, updated in zip(bins, working):
        original.liquidity = updated.liquidity
        original.fee_growth_per_unit_a = updated.fee_growth_per_unit_a
        original.fee_growth_per_unit_b = updated.fee_growth_per_unit_b

    state.active_bin_id = final_bin_id
    state.volatility_accumulator = new_volatility
    state.reserves_a = new_reserves_a
    state.reserves_b = new_reserves_b

    return DlmmSwapResult(
        pool_address=state.address,
        trader=owner,
        input_mint=source.mint,
        output_mint=destination.mint,
        amount_in=amount_in,
        amount_out=amount_out,
        protocol_fee=actual_protocol_fee,
        final_active_bin_id=final_bin_id,
        referrer=referrer.address if referrer is not None else None,
    )