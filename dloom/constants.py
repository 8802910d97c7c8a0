"""Protocol-wide numeric constants and integer bounds."""

BASIS_POINT_MAX = 10_000
PRECISION = 1_000_000_000_000
MAX_BINS_PER_POSITION = 500

U16_MAX = (1 << 16) - 1
U64_MAX = (1 << 64) - 1
U128_MAX = (1 << 128) - 1
I32_MIN = -(1 << 31)
I32_MAX = (1 << 31) - 1
I64_MIN = -(1 << 63)
I64_MAX = (1 << 63) - 1