"""Transfer fee monitor for TRON and the major EVM and Solana networks."""

__version__ = "0.1.0"
