"""Error codes raised by the protocol."""

from enum import Enum

ERROR_CODE_OFFSET = 6000


class ErrorCode(Enum):
    """Every failure the protocol can report, with its user-facing message."""

    INVALID_FEE_RATES = "The provided fee rates are invalid."
    INVALID_PARAMETERS = "The provided fee and bin_step parameters are not on the whitelist."
    INVALID_MINT_ORDER = (
        "The mint addresses are not in the correct canonical order. "
        "Token A must be less than Token B."
    )
    INVALID_MINT = "The provided mint does not match the pool's mint."
    INVALID_BIN_RANGE = "The lower bin ID must be less than the upper bin ID."
    ZERO_LIQUIDITY = "Liquidity to deposit must be greater than zero."
    SLIPPAGE_EXCEEDED = "The market price moved unfavorably, exceeding your slippage tolerance."
    UNAUTHORIZED = "The signer is not the authorized owner of this position."
    INSUFFICIENT_LIQUIDITY = "The amount of liquidity to remove exceeds the amount in the position."
    POSITION_NOT_EMPTY = "Cannot operate on a position that has no liquidity."
    ZERO_AMOUNT = "Input amount for a swap must be greater than zero."
    INVALID_VAULT = "The provided vault account does not match the pool's vault."
    INVALID_BIN_ID = "The provided bin IDs must be a multiple of the pool's bin_step."
    RANGE_TOO_WIDE = "The specified bin range is wider than the allowed maximum."
    MATH_OVERFLOW = "Math operation overflowed or underflowed."
    INVALID_BIN_STEP = "The provided bin step value is invalid (e.g., zero)."
    INSUFFICIENT_LIQUIDITY_FOR_SWAP = "Not enough liquidity in the pool to complete the swap."
    INVALID_BIN_COUNT = "The number of bins provided does not match the position's range."
    INVALID_BIN_ACCOUNT = "A provided bin account does not have the expected address."
    INVALID_POOL = "The provided position account does not belong to the specified pool."
    BIN_CACHE_MISMATCH = (
        "The list of provided bin accounts does not match the cached list "
        "in the TransactionBins account."
    )
    UPDATE_NOT_NEEDED = "The last update was too recent. Please wait before triggering another update."
    INVALID_FEE_PREFERENCE = "The selected fee preference does not permit this action."
    FEE_SHARE_EXCEEDS_TOTAL = "The sum of protocol and referrer fee shares cannot exceed 100%."
    REFERRER_IS_TRADER = "The trader cannot be the referrer."

    @property
    def message(self) -> str:
        return self.value

    @property
    def number(self) -> int:
        """Numeric code, counted from ERROR_CODE_OFFSET in declaration order."""
        return ERROR_CODE_OFFSET + list(type(self)).index(self)


class DloomError(Exception):
    """Raised when an instruction is rejected by the protocol."""

    def __init__(self, code):
        if not isinstance(code, ErrorCode):
            raise TypeError(f"expected an ErrorCode, got {type(code).__name__}")
        super().__init__(code.message)
        self.code = code

    @property
    def message(self) -> str:
        return self.code.message