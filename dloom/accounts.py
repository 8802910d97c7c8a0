"""Protocol-level accounts and a minimal token ledger."""

from dataclasses import dataclass, field

from dloom.constants import U64_MAX


@dataclass
class ProtocolConfig:
    """Singleton holding the protocol's master authority."""

    authority: str = ""


@dataclass
class TransactionBins:
    """Temporary list of bin addresses an instruction will touch."""

    owner: str = ""
    bins: list = field(default_factory=list)


@dataclass(frozen=True)
class DlmmParameter:
    """A whitelisted (bin_step, fee_rate) pair."""

    bin_step: int
    fee_rate: int


@dataclass
class DlmmParameters:
    """Whitelisted parameters for official and community DLMM pools."""

    authority: str = ""
    official_parameters: list = field(default_factory=list)
    community_parameters: list = field(default_factory=list)


@dataclass
class Mint:
    address: str
    decimals: int = 0
    supply: int = 0


@dataclass
class TokenAccount:
    address: str
    mint: str
    owner: str = ""
    amount: int = 0


def _check_amount(amount):
    if amount < 0 or amount > U64_MAX:
        raise ValueError(f"token amount out of range: {amount}")


def transfer(source, destination, amount):
    """Move tokens between two accounts of the same mint."""
    _check_amount(amount)
    if source.mint != destination.mint:
        raise ValueError("source and destination hold different mints")
    if source.amount < amount:
        raise ValueError("insufficient funds")
    if destination.amount + amount > U64_MAX:
        raise ValueError("destination balance overflow")
    source.amount -= amount
    destination.amount += amount


def mint_to(mint, destination, amount):
    """Create new tokens of a mint in a destination account."""
    _check_amount(amount)
    if destination.mint != mint.address:
        raise ValueError("destination does not hold this mint")
    if mint.supply + amount > U64_MAX or destination.amount + amount > U64_MAX:
        raise ValueError("supply overflow")
    mint.supply += amount
    destination.amount += amount


def burn(mint, source, amount):
    """Destroy tokens held in a source account."""
    _check_amount(amount)
    if source.mint != mint.address:
        raise ValueError("source does not hold this mint")
    if source.amount < amount:
        raise ValueError("insufficient funds")
    source.amount -= amount
    mint.supply -= amount