"""Burning the NFT of an emptied DLMM position and closing it."""

from dloom.accounts import burn
from dloom.errors import DloomError, ErrorCode
from dloom.events import DlmmPositionBurned


def burn_empty_position(position, owner, position_mint, nft_account):
    """Burn an empty position's NFT; the position should be discarded afterwards."""
    if position.owner != owner:
        raise DloomError(ErrorCode.UNAUTHORIZED)
    if position.liquidity != 0:
        raise DloomError(ErrorCode.POSITION_NOT_EMPTY)
    if position_mint.address != position.position_mint:
        raise ValueError("mint does not match the position's mint")
    if nft_account.mint != position_mint.address:
        raise ValueError("token account does not hold the position mint")
    if nft_account.owner != owner:
        raise PermissionError("token account is not owned by the signer")
    if nft_account.amount != 1:
        raise ValueError("token account must hold exactly the position NFT to be closed")

    burn(position_mint, nft_account, 1)
    return DlmmPositionBurned(position_address=position.address, owner=owner)