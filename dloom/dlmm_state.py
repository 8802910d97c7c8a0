"""State of discretized-liquidity pools, their bins and positions."""

import hashlib
from dataclasses import dataclass
from enum import Enum

from dloom.constants import I32_MAX, I32_MIN


class PoolType(Enum):
    OFFICIAL = "official"
    COMMUNITY = "community"


@dataclass
class Bin:
    """One price bin of a DLMM pool."""

    address: str = ""
    liquidity: int = 0
    fee_growth_per_unit_a: int = 0
    fee_growth_per_unit_b: int = 0


@dataclass
class DlmmPool:
    address: str = ""
    bump: int = 0
    authority: str = ""
    pool_type: PoolType = PoolType.OFFICIAL
    token_a_mint: str = ""
    token_b_mint: str = ""
    token_a_vault: str = ""
    token_b_vault: str = ""
    active_bin_id: int = 0
    bin_step: int = 0
    fee_rate: int = 0
    protocol_fee_share: int = 0
    referrer_fee_share: int = 0
    protocol_fee_vault_a: str = ""
    protocol_fee_vault_b: str = ""
    volatility_accumulator: int = 0
    last_fee_update_timestamp: int = 0
    reserves_a: int = 0
    reserves_b: int = 0


@dataclass
class Position:
    address: str = ""
    pool: str = ""
    owner: str = ""
    lower_bin_id: int = 0
    upper_bin_id: int = 0
    liquidity: int = 0
    position_mint: str = ""
    fee_growth_snapshot_a: int = 0
    fee_growth_snapshot_b: int = 0


def bin_address(pool_address, bin_id):
    """Deterministic address of a pool's bin, derived from the "bin" seed."""
    if not I32_MIN <= bin_id <= I32_MAX:
        raise ValueError(f"bin id out of range: {bin_id}")
    seed = b"bin" + pool_address.encode() + bin_id.to_bytes(4, "little", signed=True)
    return hashlib.sha256(seed).hexdigest()