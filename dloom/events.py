"""Events emitted by protocol instructions."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class ParameterAction(Enum):
    ADD = "add"
    REMOVE = "remove"


class ParameterList(Enum):
    OFFICIAL = "official"
    COMMUNITY = "community"


@dataclass(frozen=True)
class AmmPoolCreated:
    pool_address: str
    token_a_mint: str
    token_b_mint: str
    lp_mint: str
    fee_rate: int


@dataclass(frozen=True)
class AmmFeesUpdated:
    pool_address: str
    new_fee_rate: int


@dataclass(frozen=True)
class AmmLiquidityAdded:
    pool_address: str
    user: str
    lp_tokens_minted: int
    amount_a_deposited: int
    amount_b_deposited: int


@dataclass(frozen=True)
class AmmLiquidityRemoved:
    pool_address: str
    user: str
    lp_tokens_burned: int
    amount_a_received: int
    amount_b_received: int


@dataclass(frozen=True)
class AmmSwap:
    pool_address: str
    trader: str
    input_mint: str
    output_mint: str
    amount_in: int
    amount_out: int
    protocol_fee: int
    lp_fee: int
    referrer: Optional[str] = None


@dataclass(frozen=True)
class AmmFeesClaimed:
    pool_address: str
    user: str
    fees_claimed_a: int
    fees_claimed_b: int


@dataclass(frozen=True)
class DlmmPoolCreated:
    pool_address: str
    token_a_mint: str
    token_b_mint: str
    bin_step: int
    fee_rate: int


@dataclass(frozen=True)
class DlmmFeesUpdated:
    pool_address: str
    new_fee_rate: int


@dataclass(frozen=True)
class DlmmPositionOpened:
    pool_address: str
    owner: str
    position_address: str
    position_mint: str
    lower_bin_id: int
    upper_bin_id: int


@dataclass(frozen=True)
class DlmmLiquidityUpdate:
    position_address: str
    liquidity_added: int  # negative for a removal
    amount_a: int
    amount_b: int


@dataclass(frozen=True)
class DlmmSwapResult:
    pool_address: str
    trader: str
    input_mint: str
    output_mint: str
    amount_in: int
    amount_out: int
    protocol_fee: int
    final_active_bin_id: int
    referrer: Optional[str] = None


@dataclass(frozen=True)
class DlmmPositionBurned:
    position_address: str
    owner: str


@dataclass(frozen=True)
class DlmmParametersUpdated:
    list: ParameterList
    action: ParameterAction
    bin_step: int
    fee_rate: int


@dataclass(frozen=True)
class DlmmLiquidityModified:
    owner: str
    pool_address: str
    old_position_address: str
    new_position_address: str
    liquidity_to_move: int
    surplus_a_out: int
    surplus_b_out: int