"""In-memory constant-product AMM and discretized liquidity market maker pools with exact integer math."""

__version__ = "1.0.0"