"""Bin pricing, liquidity distribution and swap routing for DLMM pools."""

from dloom.constants import BASIS_POINT_MAX, I32_MAX, I32_MIN, PRECISION, U64_MAX, U128_MAX
from dloom.dlmm_state import bin_address
from dloom.errors import DloomError, ErrorCode


def _checked(value):
    if value < 0 or value > U128_MAX:
        raise DloomError(ErrorCode.MATH_OVERFLOW)
    return value


def _div(numerator, denominator):
    if denominator == 0:
        raise DloomError(ErrorCode.MATH_OVERFLOW)
    return numerator // denominator


def _mul_div(a, b, denominator):
    return _div(_checked(a * b), denominator)


def _step_bin(bin_id, delta):
    moved = bin_id + delta
    if not I32_MIN <= moved <= I32_MAX:
        raise DloomError(ErrorCode.MATH_OVERFLOW)
    return moved


def _require_bin_step(bin_step):
    if bin_step == 0:
        raise DloomError(ErrorCode.INVALID_BIN_STEP)


def power_fp(base, exp):
    """Raise a basis-point base to an integer power, scaled by PRECISION."""
    result = PRECISION
    base_fp = base
    remaining = exp
    while remaining > 0:
        if remaining % 2 == 1:
            result = _mul_div(result, base_fp, BASIS_POINT_MAX)
        base_fp = _mul_div(base_fp, base_fp, BASIS_POINT_MAX)
        remaining //= 2
    return result


def get_price_at_bin(bin_id, bin_step):
    """Price of a bin as a PRECISION-scaled fixed-point number."""
    _require_bin_step(bin_step)
    base = _checked(BASIS_POINT_MAX + bin_step)
    ratio = power_fp(base, abs(bin_id))
    if bin_id >= 0:
        return ratio
    return _div(_checked(PRECISION * PRECISION), ratio)


def calculate_required_for_bin(active_bin_id, bin_id, bin_step, liquidity_amount):
    """Tokens (a, b) needed to place liquidity in one bin."""
    if bin_id > active_bin_id:
        return liquidity_amount, 0
    price = get_price_at_bin(bin_id, bin_step)
    required_b = _mul_div(liquidity_amount, price, PRECISION)
    if bin_id < active_bin_id:
        return 0, required_b
    return liquidity_amount, required_b


def _bins_in_range(lower_bin_id, upper_bin_id, bin_step):
    _require_bin_step(bin_step)
    span = (upper_bin_id - lower_bin_id) % (1 << 128)
    return _checked(span // bin_step + 1)


def calculate_required_token_amounts(pool, lower_bin_id, upper_bin_id, amount_to_deposit):
    """Total tokens (a, b) needed to spread a deposit evenly over a bin range."""
    num_bins = _bins_in_range(lower_bin_id, upper_bin_id, pool.bin_step)
    liquidity_per_bin = _div(amount_to_deposit, num_bins)
    amount_a = amount_b = 0
    for bin_id in range(lower_bin_id, upper_bin_id + 1, pool.bin_step):
        required_a, required_b = calculate_required_for_bin(
            pool.active_bin_id, bin_id, pool.bin_step, liquidity_per_bin
        )
        amount_a = _checked(amount_a + required_a)
        amount_b = _checked(amount_b + required_b)
    return amount_a, amount_b


def calculate_claimable_amounts(pool, position, liquidity_to_remove):
    """Principal tokens (a, b) released by removing liquidity from a position."""
    num_bins = _bins_in_range(position.lower_bin_id, position.upper_bin_id, pool.bin_step)
    liquidity_per_bin = _div(liquidity_to_remove, num_bins)
    amount_a = amount_b = 0
    for bin_id in range(position.lower_bin_id, position.upper_bin_id + 1, pool.bin_step):
        if bin_id > pool.active_bin_id:
            amount_a = _checked(amount_a + liquidity_per_bin)
            continue
        price = get_price_at_bin(bin_id, pool.bin_step)
        amount_b = _checked(amount_b + _mul_div(liquidity_per_bin, price, PRECISION))
        if bin_id == pool.active_bin_id:
            amount_a = _checked(amount_a + liquidity_per_bin)
    return amount_a, amount_b


def calculate_accrued_fees(position, bin):
    """Fees (a, b) a position has earned in a bin since its last snapshot."""

    def accrued(growth, snapshot):
        delta = max(growth - snapshot, 0)
        product = delta * position.liquidity
        if product > U128_MAX:
            return 0
        return (product // PRECISION) & U64_MAX

    return (
        accrued(bin.fee_growth_per_unit_a, position.fee_growth_snapshot_a),
        accrued(bin.fee_growth_per_unit_b, position.fee_growth_snapshot_b),
    )


def validated_bin_map(transaction_bins, bins):
    """Map each cached bin address to the provided bin, failing if any is missing."""
    provided = {bin.address: bin for bin in bins}
    try:
        return {address: provided[address] for address in transaction_bins.bins}
    except KeyError:
        raise DloomError(ErrorCode.BIN_CACHE_MISMATCH) from None


def _swap(pool, amount_in, transaction_bins, bins, a_to_b):
    validated = validated_bin_map(transaction_bins, bins)
    remaining = amount_in
    total_out = 0
    total_protocol_fee = 0
    current_bin_id = pool.active_bin_id

    for _ in transaction_bins.bins:
        if remaining == 0:
            break
        bin = validated.get(bin_address(pool.address, current_bin_id))
        if bin is None:
            raise DloomError(ErrorCode.BIN_CACHE_MISMATCH)
        price = get_price_at_bin(current_bin_id, pool.bin_step)

        if a_to_b:
            available = _mul_div(bin.liquidity, price, PRECISION)
        else:
            available = bin.liquidity

        if available > 0:
            total_fee = _mul_div(remaining, pool.fee_rate, BASIS_POINT_MAX)
            protocol_fee = _mul_div(total_fee, pool.protocol_fee_share, BASIS_POINT_MAX)
            lp_fee = _checked(total_fee - protocol_fee)
            total_protocol_fee = _checked(total_protocol_fee + protocol_fee)
            after_fee = _checked(remaining - total_fee)

            if a_to_b:
                amount_out = min(_mul_div(after_fee, price, PRECISION), available)
                consumed = _mul_div(amount_out, PRECISION, price)
            else:
                amount_out = min(_mul_div(after_fee, PRECISION, price), available)
                consumed = _mul_div(amount_out, price, PRECISION)
            with_fee = _mul_div(
                consumed, BASIS_POINT_MAX, _checked(BASIS_POINT_MAX - pool.fee_rate)
            )

            if bin.liquidity > 0:
                growth = _mul_div(lp_fee, PRECISION, bin.liquidity)
                if a_to_b:
                    bin.fee_growth_per_unit_b = _checked(bin.fee_growth_per_unit_b + growth)
                else:
                    bin.fee_growth_per_unit_a = _checked(bin.fee_growth_per_unit_a + growth)

            if a_to_b:
                bin.liquidity = _checked(bin.liquidity + consumed)
            else:
                bin.liquidity = _checked(bin.liquidity - amount_out)
            total_out = _checked(total_out + amount_out)
            remaining = _checked(remaining - with_fee)

        current_bin_id = _step_bin(current_bin_id, -1 if a_to_b else 1)

    if remaining != 0:
        raise DloomError(ErrorCode.INSUFFICIENT_LIQUIDITY_FOR_SWAP)
    return total_out & U64_MAX, total_protocol_fee & U64_MAX, current_bin_id


def swap_a_to_b(pool, amount_in, transaction_bins, bins):
    """Swap token A for B, walking bins downward; returns (out, protocol_fee, bin_id)."""
    return _swap(pool, amount_in, transaction_bins, bins, a_to_b=True)


def swap_b_to_a(pool, amount_in, transaction_bins, bins):
    """Swap token B for A, walking bins upward; returns (out, protocol_fee, bin_id)."""
    return _swap(pool, amount_in, transaction_bins, bins, a_to_b=False)