# dloom

`dloom` models two kinds of liquidity pools as plain Python objects, with
exact integer arithmetic and explicit fee, slippage and overflow rules:

- **AMM**: a constant-product (`x * y = k`) pool with LP tokens, a protocol
  and referrer fee split, per-LP-token fee growth, a time-weighted price
  oracle and volatility-based fee updates.
- **DLMM**: a discretized liquidity market maker whose liquidity sits in
  price bins; bin `n` has price `(1 + bin_step / 10_000) ** n`, scaled by
  `PRECISION`.

Everything works on in-memory accounts: pools, positions, bins, mints and
token accounts. Token balances move through `dloom.accounts.transfer`,
`mint_to` and `burn`. Addresses are strings; those the package derives
(pools, vaults, LP mints, bins) are SHA-256 hex digests of their seeds.

## Installation

```
pip install dloom
```

Python 3.10 or later is required. The package has no runtime dependencies.

## Modules

| Module | What it holds |
| --- | --- |
| `dloom.constants` | `BASIS_POINT_MAX`, `PRECISION`, `MAX_BINS_PER_POSITION` and integer bounds (`U64_MAX`, `U128_MAX`, `I32_MIN`, ...) |
| `dloom.errors` | `ErrorCode`, `DloomError` |
| `dloom.events` | frozen event records such as `AmmSwap`, `DlmmSwapResult`, and the enums `ParameterList`, `ParameterAction` |
| `dloom.accounts` | `ProtocolConfig`, `TransactionBins`, `DlmmParameter`, `DlmmParameters`, `Mint`, `TokenAccount`, `transfer`, `mint_to`, `burn` |
| `dloom.amm_state` | `AmmPool`, `AmmPosition`, `FeePreference` |
| `dloom.dlmm_state` | `DlmmPool`, `Position`, `Bin`, `PoolType`, `bin_address` |
| `dloom.amm_math` | `isqrt`, `calculate_lp_tokens_to_mint`, `calculate_swap_out_amount`, `calculate_assets_to_withdraw` |
| `dloom.dlmm_math` | `power_fp`, `get_price_at_bin`, `calculate_required_for_bin`, `calculate_required_token_amounts`, `calculate_claimable_amounts`, `calculate_accrued_fees`, `validated_bin_map`, `swap_a_to_b`, `swap_b_to_a` |
| `dloom.amm_pool` | `create_amm_pool`, `open_amm_position`, `update_oracle`, `swap_on_amm` |
| `dloom.amm_liquidity` | `claim_lp_fees`, `reinvest_lp_fees`, `remove_amm_liquidity`, `update_fee_preference` |
| `dloom.amm_fees` | `update_amm_fees` |
| `dloom.dlmm_fees` | `update_dlmm_fees` |
| `dloom.protocol` | `initialize_protocol`, `initialize_dlmm_parameters`, `update_dlmm_parameters`, `setup_bins` |
| `dloom.dlmm_pool` | `create_dlmm_pool`, `create_dlmm_community_pool` |
| `dloom.dlmm_add` | `dlmm_add_liquidity` |
| `dloom.dlmm_remove` | `dlmm_remove_liquidity` |
| `dloom.dlmm_swap` | `dlmm_swap` |
| `dloom.position_burn` | `burn_empty_position` |

`create_amm_pool` and the two DLMM pool constructors return a pair: a pool
bundle and the creation event. The bundle holds the pool's state as `.state`
(an `AmmPool` or `DlmmPool`), its mints and its vault `TokenAccount`s
(`token_a_vault`, `protocol_fee_vault_a`, ... and, for AMM pools, `lp_mint`).
Swaps and liquidity operations take the bundle; `update_oracle`,
`update_amm_fees` and `update_dlmm_fees` take the state object itself.
Functions that depend on time take the current Unix timestamp as `now`.

## An AMM pool

There is no deposit operation for AMM pools, so the example seeds the pool by
hand, with the amounts `calculate_lp_tokens_to_mint` gives.

```python
from dloom.accounts import Mint, TokenAccount, mint_to, transfer
from dloom.amm_liquidity import claim_lp_fees
from dloom.amm_math import calculate_lp_tokens_to_mint
from dloom.amm_pool import create_amm_pool, open_amm_position, swap_on_amm
from dloom.amm_state import FeePreference

mint_a, mint_b = Mint("mint-a", decimals=6), Mint("mint-b", decimals=9)
pool, created = create_amm_pool(
    "protocol-authority", mint_a, mint_b,
    fee_rate=30, protocol_fee_share=1_000, referrer_fee_share=0,
)

alice_a = TokenAccount("alice-a", mint=mint_a.address, owner="alice")
alice_b = TokenAccount("alice-b", mint=mint_b.address, owner="alice")
alice_lp = TokenAccount("alice-lp", mint=pool.lp_mint.address, owner="alice")
mint_to(mint_a, alice_a, 1_000_000)
mint_to(mint_b, alice_b, 1_000_000)

amount_a, amount_b, lp = calculate_lp_tokens_to_mint(
    pool.state, pool.lp_mint.supply, 500_000, 500_000
)                                        # (500000, 500000, 500000)
transfer(alice_a, pool.token_a_vault, amount_a)
transfer(alice_b, pool.token_b_vault, amount_b)
pool.state.reserves_a += amount_a
pool.state.reserves_b += amount_b
mint_to(pool.lp_mint, alice_lp, lp)
position = open_amm_position(pool.state, "alice", FeePreference.MANUAL_CLAIM)
position.lp_token_amount = lp

bob_a = TokenAccount("bob-a", mint=mint_a.address, owner="bob")
bob_b = TokenAccount("bob-b", mint=mint_b.address, owner="bob")
mint_to(mint_a, bob_a, 10_000)
swap = swap_on_amm(pool, "bob", bob_a, bob_b, 10_000, min_amount_out=0, now=1_700_000_000)
swap.amount_out, swap.protocol_fee, swap.lp_fee   # (9775, 3, 27)

claimed = claim_lp_fees(pool, position, "alice", alice_a, alice_b)
claimed.fees_claimed_a                   # 27
```

## A DLMM pool

Official pools need a protocol configuration and a whitelisted
`(bin_step, fee_rate)` pair; `create_dlmm_community_pool` uses the community
whitelist instead and makes the payer the pool's authority. Liquidity
operations work on the bins listed in a `TransactionBins` cache made by
`setup_bins`, and on `Bin` objects whose addresses come from `bin_address`.

```python
from dloom.accounts import DlmmParameter, Mint, TokenAccount, mint_to
from dloom.dlmm_add import dlmm_add_liquidity
from dloom.dlmm_pool import create_dlmm_pool
from dloom.dlmm_state import Bin, Position, bin_address
from dloom.protocol import initialize_dlmm_parameters, initialize_protocol, setup_bins

config = initialize_protocol("protocol-authority")
params = initialize_dlmm_parameters(
    "protocol-authority", [DlmmParameter(bin_step=1, fee_rate=30)], []
)
mint_a, mint_b = Mint("mint-a"), Mint("mint-b")
pool, _ = create_dlmm_pool(
    config, params, "protocol-authority", mint_a, mint_b,
    bin_step=1, fee_rate=30, protocol_fee_share=1_000, referrer_fee_share=0,
    initial_bin_id=0, now=1_700_000_000,
)

position = Position(address="position-1", pool=pool.address, owner="alice",
                    lower_bin_id=1, upper_bin_id=3)
bins = [Bin(address=bin_address(pool.address, bin_id)) for bin_id in (1, 2, 3)]
cache = setup_bins("alice", [b.address for b in bins])

alice_a = TokenAccount("alice-a", mint=mint_a.address, owner="alice")
alice_b = TokenAccount("alice-b", mint=mint_b.address, owner="alice")
mint_to(mint_a, alice_a, 3_000)

event = dlmm_add_liquidity(pool, position, "alice", cache, bins,
                           alice_a, alice_b, start_bin_id=1, liquidity_per_bin=1_000)
event.liquidity_added, event.amount_a, event.amount_b   # (3000, 3000, 0)
```

Bins above the active bin hold only token A, bins below it only token B, and
the active bin both. `dlmm_add_liquidity`, `dlmm_remove_liquidity` and
`dlmm_swap` change nothing unless the whole operation succeeds. `dlmm_swap`
walks bins downward for A-to-B and upward for B-to-A, moves the pool's active
bin and adds the number of bins crossed to its volatility accumulator, which
`update_dlmm_fees` turns into a fee of 10 basis points plus up to 90 more.

## Quick look at the math

```python
from dloom.amm_math import calculate_assets_to_withdraw, isqrt
from dloom.constants import PRECISION
from dloom.dlmm_math import get_price_at_bin

isqrt(1_000_000)                                      # 1000
calculate_assets_to_withdraw(1_000, 4_000, 100, 25)   # (250, 1000)
get_price_at_bin(0, 20) == PRECISION                  # True: bin 0 is price 1.0
```

## Errors

Protocol checks raise `dloom.errors.DloomError`, whose `code` is an
`ErrorCode`. Each code has a `message` (also the exception's text) and a
`number`, counted from 6000 in declaration order.

```python
from dloom.amm_math import calculate_assets_to_withdraw
from dloom.errors import DloomError, ErrorCode

try:
    calculate_assets_to_withdraw(1_000, 1_000, 0, 10)
except DloomError as exc:
    assert exc.code is ErrorCode.INSUFFICIENT_LIQUIDITY
```

Some failures outside the protocol's own checks use built-in exceptions
instead: `ValueError` for out-of-range inputs and insufficient token balances,
and `PermissionError` where a token account, position or bin cache is not
owned by the signer named in the call.

## What the package does not do

- There is no operation to deposit into an AMM pool; seed reserves and mint
  LP tokens yourself, as in the example above.
- There is no operation to open a DLMM position or mint its position NFT;
  build a `Position` directly. `burn_empty_position` only burns the NFT from a
  token account you supply.
- Liquidity cannot be moved from one DLMM position to another.
  `AmmLiquidityAdded`, `DlmmPositionOpened` and `DlmmLiquidityModified` exist
  as event records, but no function returns them.
- Nothing is stored: all state lives in the objects you hold. There is no
  clock, network access or command-line tool.

## Running the tests

```
pip install -e ".[test]"
pytest
```