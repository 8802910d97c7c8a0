"""Manual and volatility-driven fee updates for official DLMM pools."""

from dloom.constants import I64_MAX, I64_MIN, U16_MAX
from dloom.dlmm_state import PoolType
from dloom.errors import DloomError, ErrorCode
from dloom.events import DlmmFeesUpdated

MIN_UPDATE_INTERVAL = 3600
BASE_FEE = 10
MAX_DYNAMIC_FEE = 90


def update_dlmm_fees(config, pool, authority, now, new_fee_rate=None):
    """Set a pool's fee rate, either to a given value or from its volatility."""
    if config.authority != authority:
        raise DloomError(ErrorCode.UNAUTHORIZED)
    if pool.authority != authority or pool.pool_type is not PoolType.OFFICIAL:
        raise DloomError(ErrorCode.UNAUTHORIZED)

    if new_fee_rate is not None:
        if not 0 <= new_fee_rate <= U16_MAX:
            raise ValueError(f"fee rate out of range: {new_fee_rate}")
        pool.fee_rate = new_fee_rate
    else:
        elapsed = now - pool.last_fee_update_timestamp
        if not I64_MIN <= elapsed <= I64_MAX:
            raise DloomError(ErrorCode.MATH_OVERFLOW)
        if elapsed <= MIN_UPDATE_INTERVAL:
            raise DloomError(ErrorCode.UPDATE_NOT_NEEDED)
        volatility = pool.volatility_accumulator * 100 // elapsed
        dynamic_fee = min(volatility & U16_MAX, MAX_DYNAMIC_FEE)
        pool.fee_rate = BASE_FEE + dynamic_fee

    pool.volatility_accumulator = 0
    pool.last_fee_update_timestamp = now
    return DlmmFeesUpdated(pool_address=pool.address, new_fee_rate=pool.fee_rate)