"""Manual and volatility-driven fee updates for AMM pools."""

from dloom.amm_pool import update_oracle
from dloom.constants import BASIS_POINT_MAX, I64_MAX, I64_MIN, U16_MAX
from dloom.errors import DloomError, ErrorCode
from dloom.events import AmmFeesUpdated

MIN_UPDATE_INTERVAL = 3600
BASE_FEE = 25
MAX_FEE = 100
VOLATILITY_SCALE = 1_000_000


def update_amm_fees(config, pool, authority, now, new_fee_rate=None):
    """Set an AmmPool's fee rate, to a given value or from its price volatility."""
    if config.authority != authority or pool.authority != authority:
        raise DloomError(ErrorCode.UNAUTHORIZED)

    if new_fee_rate is not None:
        if not 0 <= new_fee_rate <= U16_MAX:
            raise ValueError(f"fee rate out of range: {new_fee_rate}")
        if new_fee_rate > BASIS_POINT_MAX:
            raise DloomError(ErrorCode.INVALID_FEE_RATES)
        pool.fee_rate = new_fee_rate
    else:
        elapsed = now - pool.last_fee_update_timestamp
        if not I64_MIN <= elapsed <= I64_MAX:
            raise DloomError(ErrorCode.MATH_OVERFLOW)
        if elapsed <= MIN_UPDATE_INTERVAL:
            raise DloomError(ErrorCode.UPDATE_NOT_NEEDED)

        update_oracle(pool, now)

        if pool.price_a_cumulative_last_fee_update > 0:
            price_change = abs(pool.price_a_cumulative - pool.price_a_cumulative_last_fee_update)
        else:
            price_change = 0
        volatility = price_change // elapsed
        dynamic_fee = (volatility // VOLATILITY_SCALE) & U16_MAX
        total = BASE_FEE + dynamic_fee
        if total > U16_MAX:
            raise DloomError(ErrorCode.MATH_OVERFLOW)
        pool.fee_rate = min(total, MAX_FEE)

    pool.last_fee_update_timestamp = now
    pool.price_a_cumulative_last_fee_update = pool.price_a_cumulative
    return AmmFeesUpdated(pool_address=pool.address, new_fee_rate=pool.fee_rate)