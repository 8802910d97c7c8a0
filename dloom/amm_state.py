"""State of constant-product AMM pools and positions."""

from dataclasses import dataclass
from enum import Enum


class FeePreference(Enum):
    """How a liquidity provider's fees are handled."""

    MANUAL_CLAIM = "manual_claim"
    AUTO_COMPOUND = "auto_compound"


@dataclass
class AmmPool:
    """A constant-product (x * y = k) pool."""

    address: str = ""
    bump: int = 0
    authority: str = ""
    token_a_mint: str = ""
    token_b_mint: str = ""
    token_a_vault: str = ""
    token_b_vault: str = ""
    lp_mint: str = ""
    fee_rate: int = 0
    protocol_fee_share: int = 0
    referrer_fee_share: int = 0
    protocol_fee_vault_a: str = ""
    protocol_fee_vault_b: str = ""
    reserves_a: int = 0
    reserves_b: int = 0
    fee_growth_per_lp_token_a: int = 0
    fee_growth_per_lp_token_b: int = 0
    price_a_cumulative: int = 0
    price_b_cumulative: int = 0
    last_update_timestamp: int = 0
    last_fee_update_timestamp: int = 0
    price_a_cumulative_last_fee_update: int = 0


@dataclass
class AmmPosition:
    """A user's liquidity position in one AMM pool."""

    address: str = ""
    pool: str = ""
    owner: str = ""
    lp_token_amount: int = 0
    fee_growth_snapshot_a: int = 0
    fee_growth_snapshot_b: int = 0
    fee_preference: FeePreference = FeePreference.MANUAL_CLAIM