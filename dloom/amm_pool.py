"""Creation of constant-product pools, positions, the price oracle and swaps."""

import hashlib
from dataclasses import dataclass

from dloom.accounts import Mint, TokenAccount, transfer
from dloom.amm_math import calculate_swap_out_amount
from dloom.amm_state import AmmPool, AmmPosition
from dloom.constants import BASIS_POINT_MAX, I64_MAX, I64_MIN, PRECISION, U64_MAX, U128_MAX
from dloom.errors import DloomError, ErrorCode
from dloom.events import AmmPoolCreated, AmmSwap

LP_MINT_DECIMALS = 6
ORACLE_PRICE_SCALE = 1_000_000_000


def _derive(*seeds):
    """Deterministic address derived from a sequence of string seeds."""
    return hashlib.sha256(b"\x00".join(seed.encode() for seed in seeds)).hexdigest()


def _checked_u64(value):
    if not 0 <= value <= U64_MAX:
        raise DloomError(ErrorCode.MATH_OVERFLOW)
    return value


def _checked_u128(value):
    if not 0 <= value <= U128_MAX:
        raise DloomError(ErrorCode.MATH_OVERFLOW)
    return value


@dataclass
class _AmmAccounts:
    """A pool's state together with the mints and token accounts it controls."""

    state: AmmPool
    token_a_mint: Mint
    token_b_mint: Mint
    lp_mint: Mint
    token_a_vault: TokenAccount
    token_b_vault: TokenAccount
    protocol_fee_vault_a: TokenAccount
    protocol_fee_vault_b: TokenAccount

    @property
    def address(self):
        return self.state.address


def create_amm_pool(
    authority, token_a_mint, token_b_mint, fee_rate, protocol_fee_share, referrer_fee_share
):
    """Create a pool for two mints; returns (pool accounts, AmmPoolCreated)."""
    if not token_a_mint.address < token_b_mint.address:
        raise DloomError(ErrorCode.INVALID_MINT_ORDER)
    for rate in (fee_rate, protocol_fee_share, referrer_fee_share):
        if not 0 <= rate <= BASIS_POINT_MAX:
            raise DloomError(ErrorCode.INVALID_FEE_RATES)
    if protocol_fee_share + referrer_fee_share > BASIS_POINT_MAX:
        raise DloomError(ErrorCode.FEE_SHARE_EXCEEDS_TOTAL)

    pool_address = _derive("amm_pool", token_a_mint.address, token_b_mint.address)
    lp_mint = Mint(address=_derive("lp_mint", pool_address), decimals=LP_MINT_DECIMALS)

    def vault(seed, mint, owner):
        return TokenAccount(
            address=_derive(seed, pool_address, mint.address), mint=mint.address, owner=owner
        )

    accounts = _AmmAccounts(
        state=AmmPool(),
        token_a_mint=token_a_mint,
        token_b_mint=token_b_mint,
        lp_mint=lp_mint,
        token_a_vault=vault("vault", token_a_mint, pool_address),
        token_b_vault=vault("vault", token_b_mint, pool_address),
        protocol_fee_vault_a=vault("protocol_fee_vault", token_a_mint, authority),
        protocol_fee_vault_b=vault("protocol_fee_vault", token_b_mint, authority),
    )
    accounts.state = AmmPool(
        address=pool_address,
        authority=authority,
        token_a_mint=token_a_mint.address,
        token_b_mint=token_b_mint.address,
        token_a_vault=accounts.token_a_vault.address,
        token_b_vault=accounts.token_b_vault.address,
        lp_mint=lp_mint.address,
        fee_rate=fee_rate,
        protocol_fee_share=protocol_fee_share,
        referrer_fee_share=referrer_fee_share,
        protocol_fee_vault_a=accounts.protocol_fee_vault_a.address,
        protocol_fee_vault_b=accounts.protocol_fee_vault_b.address,
    )
    event = AmmPoolCreated(
        pool_address=pool_address,
        token_a_mint=token_a_mint.address,
        token_b_mint=token_b_mint.address,
        lp_mint=lp_mint.address,
        fee_rate=fee_rate,
    )
    return accounts, event


def open_amm_position(pool, owner, fee_preference):
    """Open an empty liquidity position for an owner in a pool."""
    return AmmPosition(
        address=_derive("amm_position", owner, pool.address),
        pool=pool.address,
        owner=owner,
        lp_token_amount=0,
        fee_growth_snapshot_a=0,
        fee_growth_snapshot_b=0,
        fee_preference=fee_preference,
    )


def update_oracle(pool, now):
    """Accumulate time-weighted prices of an AmmPool's state up to ``now``."""
    if pool.last_update_timestamp == 0:
        pool.last_update_timestamp = now
        return

    elapsed = now - pool.last_update_timestamp
    if not I64_MIN <= elapsed <= I64_MAX:
        raise DloomError(ErrorCode.MATH_OVERFLOW)

    if elapsed > 0 and pool.reserves_a > 0 and pool.reserves_b > 0:
        price_a = _checked_u128(pool.reserves_b * ORACLE_PRICE_SCALE) // pool.reserves_a
        pool.price_a_cumulative = _checked_u128(
            pool.price_a_cumulative + _checked_u128(price_a * elapsed)
        )
        price_b = _checked_u128(pool.reserves_a * ORACLE_PRICE_SCALE) // pool.reserves_b
        pool.price_b_cumulative = _checked_u128(
            pool.price_b_cumulative + _checked_u128(price_b * elapsed)
        )

    pool.last_update_timestamp = now


def swap_on_amm(pool, trader, source, destination, amount_in, min_amount_out, now, referrer=None):
    """Swap ``amount_in`` of the source token for the other token; returns AmmSwap."""
    state = pool.state
    if referrer is not None and referrer.mint != source.mint:
        raise DloomError(ErrorCode.INVALID_MINT)

    update_oracle(state, now)

    is_a_to_b = source.mint == state.token_a_mint
    if is_a_to_b:
        source_reserves, destination_reserves = state.reserves_a, state.reserves_b
        source_vault, destination_vault = pool.token_a_vault, pool.token_b_vault
        fee_vault = pool.protocol_fee_vault_a
    else:
        if source.mint != state.token_b_mint:
            raise DloomError(ErrorCode.INVALID_MINT)
        source_reserves, destination_reserves = state.reserves_b, state.reserves_a
        source_vault, destination_vault = pool.token_b_vault, pool.token_a_vault
        fee_vault = pool.protocol_fee_vault_b

    amount_out, protocol_fee, lp_fee = calculate_swap_out_amount(
        state, amount_in, source_reserves, destination_reserves
    )
    if amount_out < min_amount_out:
        raise DloomError(ErrorCode.SLIPPAGE_EXCEEDED)

    if source.owner != trader:
        raise PermissionError("trader does not own the source account")
    transfer(source, source_vault, amount_in)

    actual_protocol_fee = protocol_fee
    if protocol_fee > 0 and state.referrer_fee_share > 0 and referrer is not None:
        referral_fee = (protocol_fee * state.referrer_fee_share // BASIS_POINT_MAX) & U64_MAX
        if referral_fee > 0:
            actual_protocol_fee = _checked_u64(protocol_fee - referral_fee)
            transfer(source_vault, referrer, referral_fee)

    if actual_protocol_fee > 0:
        transfer(source_vault, fee_vault, actual_protocol_fee)

    if amount_out > 0:
        transfer(destination_vault, destination, amount_out)

    added_to_reserves = _checked_u64(amount_in - protocol_fee)
    new_source_reserves = _checked_u64(source_reserves + added_to_reserves)
    new_destination_reserves = _checked_u64(destination_reserves - amount_out)
    if is_a_to_b:
        state.reserves_a, state.reserves_b = new_source_reserves, new_destination_reserves
    else:
        state.reserves_b, state.reserves_a = new_source_reserves, new_destination_reserves

    lp_supply = pool.lp_mint.supply
    if lp_supply > 0 and lp_fee > 0:
        growth = _checked_u128(lp_fee * PRECISION) // lp_supply
        if is_a_to_b:
            state.fee_growth_per_lp_token_a = _checked_u128(
                state.fee_growth_per_lp_token_a + growth
            )
        else:
            state.fee_growth_per_lp_token_b = _checked_u128(
                state.fee_growth_per_lp_token_b + growth
            )

    return AmmSwap(
        pool_address=state.address,
        trader=trader,
        input_mint=source.mint,
        output_mint=destination.mint,
        amount_in=amount_in,
        amount_out=amount_out,
        protocol_fee=actual_protocol_fee,
        lp_fee=lp_fee,
        referrer=referrer.address if referrer is not None else None,
    )