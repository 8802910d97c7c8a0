"""Creation of official and community DLMM pools."""

import hashlib
from dataclasses import dataclass

from dloom.accounts import Mint, TokenAccount
from dloom.constants import BASIS_POINT_MAX, I32_MAX, I32_MIN, U16_MAX
from dloom.dlmm_state import DlmmPool, PoolType
from dloom.errors import DloomError, ErrorCode
from dloom.events import DlmmPoolCreated


def _derive(*seeds):
    """Deterministic address derived from a sequence of string seeds."""
    return hashlib.sha256(b"\x00".join(seed.encode() for seed in seeds)).hexdigest()


@dataclass
class _DlmmAccounts:
    """A DLMM pool's state together with the mints and token accounts it controls."""

    state: DlmmPool
    token_a_mint: Mint
    token_b_mint: Mint
    token_a_vault: TokenAccount
    token_b_vault: TokenAccount
    protocol_fee_vault_a: TokenAccount
    protocol_fee_vault_b: TokenAccount

    @property
    def address(self):
        return self.state.address


def _create(
    whitelist,
    pool_type,
    pool_authority,
    fee_authority,
    token_a_mint,
    token_b_mint,
    bin_step,
    fee_rate,
    protocol_fee_share,
    referrer_fee_share,
    initial_bin_id,
    now,
):
    if not 0 <= bin_step <= U16_MAX:
        raise ValueError(f"bin step out of range: {bin_step}")
    if not I32_MIN <= initial_bin_id <= I32_MAX:
        raise ValueError(f"bin id out of range: {initial_bin_id}")
    if not token_a_mint.address < token_b_mint.address:
        raise DloomError(ErrorCode.INVALID_MINT_ORDER)

    if not any(p.bin_step == bin_step and p.fee_rate == fee_rate for p in whitelist):
        raise DloomError(ErrorCode.INVALID_PARAMETERS)
    for share in (protocol_fee_share, referrer_fee_share):
        if not 0 <= share <= BASIS_POINT_MAX:
            raise DloomError(ErrorCode.INVALID_FEE_RATES)

    pool_address = _derive("dlmm_pool", token_a_mint.address, token_b_mint.address, str(bin_step))

    def vault(seed, mint, owner):
        return TokenAccount(
            address=_derive(seed, pool_address, mint.address), mint=mint.address, owner=owner
        )

    token_a_vault = vault("vault", token_a_mint, pool_address)
    token_b_vault = vault("vault", token_b_mint, pool_address)
    fee_vault_a = vault("protocol_fee_vault", token_a_mint, fee_authority)
    fee_vault_b = vault("protocol_fee_vault", token_b_mint, fee_authority)

    state = DlmmPool(
        address=pool_address,
        authority=pool_authority,
        pool_type=pool_type,
        token_a_mint=token_a_mint.address,
        token_b_mint=token_b_mint.address,
        token_a_vault=token_a_vault.address,
        token_b_vault=token_b_vault.address,
        active_bin_id=initial_bin_id,
        bin_step=bin_step,
        fee_rate=fee_rate,
        protocol_fee_share=protocol_fee_share,
        referrer_fee_share=referrer_fee_share,
        protocol_fee_vault_a=fee_vault_a.address,
        protocol_fee_vault_b=fee_vault_b.address,
        volatility_accumulator=0,
        last_fee_update_timestamp=now,
        reserves_a=0,
        reserves_b=0,
    )
    accounts = _DlmmAccounts(
        state=state,
        token_a_mint=token_a_mint,
        token_b_mint=token_b_mint,
        token_a_vault=token_a_vault,
        token_b_vault=token_b_vault,
        protocol_fee_vault_a=fee_vault_a,
        protocol_fee_vault_b=fee_vault_b,
    )
    event = DlmmPoolCreated(
        pool_address=pool_address,
        token_a_mint=token_a_mint.address,
        token_b_mint=token_b_mint.address,
        bin_step=bin_step,
        fee_rate=fee_rate,
    )
    return accounts, event


def create_dlmm_pool(
    config,
    parameters,
    authority,
    token_a_mint,
    token_b_mint,
    bin_step,
    fee_rate,
    protocol_fee_share,
    referrer_fee_share,
    initial_bin_id,
    now,
):
    """Create an official pool signed by the protocol authority; returns (pool, event)."""
    if config.authority != authority:
        raise DloomError(ErrorCode.UNAUTHORIZED)
    return _create(
        parameters.official_parameters,
        PoolType.OFFICIAL,
        authority,
        authority,
        token_a_mint,
        token_b_mint,
        bin_step,
        fee_rate,
        protocol_fee_share,
        referrer_fee_share,
        initial_bin_id,
        now,
    )


def create_dlmm_community_pool(
    parameters,
    payer,
    authority,
    token_a_mint,
    token_b_mint,
    bin_step,
    fee_rate,
    protocol_fee_share,
    referrer_fee_share,
    initial_bin_id,
    now,
):
    """Create a community pool owned by its payer; returns (pool, event)."""
    return _create(
        parameters.community_parameters,
        PoolType.COMMUNITY,
        payer,
        authority,
        token_a_mint,
        token_b_mint,
        bin_step,
        fee_rate,
        protocol_fee_share,
        referrer_fee_share,
        initial_bin_id,
        now,
    )