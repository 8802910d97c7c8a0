"""Pricing and share arithmetic for constant-product pools."""

import math

from dloom.constants import BASIS_POINT_MAX, U64_MAX, U128_MAX
from dloom.errors import DloomError, ErrorCode


def _checked(value):
    if value < 0 or value > U128_MAX:
        raise DloomError(ErrorCode.MATH_OVERFLOW)
    return value


def _div(numerator, denominator):
    if denominator == 0:
        raise DloomError(ErrorCode.MATH_OVERFLOW)
    return numerator // denominator


def _as_u64(value):
    return value & U64_MAX


def isqrt(value):
    """Floor of the square root of a non-negative integer."""
    if value < 0:
        raise ValueError("square root of a negative number")
    return math.isqrt(value)


def calculate_lp_tokens_to_mint(pool, lp_total_supply, amount_a_desired, amount_b_desired):
    """Return (amount_a, amount_b, lp_tokens) for a deposit into the pool."""
    if lp_total_supply == 0:
        product = _checked(amount_a_desired * amount_b_desired)
        return amount_a_desired, amount_b_desired, _as_u64(isqrt(product))

    reserves_a = pool.reserves_a
    reserves_b = pool.reserves_b

    optimal_b = _div(_checked(amount_a_desired * reserves_b), reserves_a)
    if optimal_b <= amount_b_desired:
        amount_a, amount_b = amount_a_desired, _as_u64(optimal_b)
    else:
        optimal_a = _div(_checked(amount_b_desired * reserves_a), reserves_b)
        amount_a, amount_b = _as_u64(optimal_a), amount_b_desired

    lp_from_a = _div(_checked(amount_a * lp_total_supply), reserves_a)
    lp_from_b = _div(_checked(amount_b * lp_total_supply), reserves_b)
    return amount_a, amount_b, _as_u64(min(lp_from_a, lp_from_b))


def calculate_swap_out_amount(pool, amount_in, source_reserves, destination_reserves):
    """Return (amount_out, protocol_fee, lp_fee) for a swap."""
    if amount_in <= 0:
        raise DloomError(ErrorCode.ZERO_AMOUNT)
    if source_reserves <= 0 or destination_reserves <= 0:
        raise DloomError(ErrorCode.INSUFFICIENT_LIQUIDITY_FOR_SWAP)

    total_fee = _checked(amount_in * pool.fee_rate) // BASIS_POINT_MAX
    protocol_fee = _checked(total_fee * pool.protocol_fee_share) // BASIS_POINT_MAX
    lp_fee = _checked(total_fee - protocol_fee)
    amount_in_after_fees = _checked(amount_in - total_fee)

    numerator = _checked(destination_reserves * amount_in_after_fees)
    denominator = _checked(source_reserves + amount_in_after_fees)
    amount_out = _div(numerator, denominator)

    return _as_u64(amount_out), _as_u64(protocol_fee), _as_u64(lp_fee)


def calculate_assets_to_withdraw(reserves_a, reserves_b, lp_total_supply, lp_tokens_to_burn):
    """Return the (amount_a, amount_b) owed for burning LP tokens."""
    if lp_total_supply <= 0:
        raise DloomError(ErrorCode.INSUFFICIENT_LIQUIDITY)
    amount_a = _checked(reserves_a * lp_tokens_to_burn) // lp_total_supply
    amount_b = _checked(reserves_b * lp_tokens_to_burn) // lp_total_supply
    return _as_u64(amount_a), _as_u64(amount_b)