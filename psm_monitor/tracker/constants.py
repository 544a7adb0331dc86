"""Constants for fee tracking and reporting."""

from dataclasses import dataclass


@dataclass(frozen=True)
class NetworkProfile:
    """Cost model of one USDT transfer on a network.

    Attributes:
        key: Column prefix in the fee_records table.
        label: Display name in reports.
        low_units: Resource units of a transfer to an existing holder.
        high_units: Resource units of a transfer to a fresh address.
        scale: Divisor turning price * unit price * units into USD.
    """

    key: str
    label: str
    low_units: int
    high_units: int
    scale: float


# Energy units; energy price is in sun (1e-6 TRX)
TRON = NetworkProfile("tron", "TRON", 14650, 29650, 1e6)
# Gas units; gas price is in gwei (1e-9 native token)
ETHEREUM = NetworkProfile("eth", "ETH", 41309, 63209, 1e9)
BSC = NetworkProfile("bsc", "BSC", 34515, 51627, 1e9)
POLYGON = NetworkProfile("polygon", "Polygon", 35394, 57306, 1e9)
AVALANCHE = NetworkProfile("avalanche", "Avalanche", 44038, 61138, 1e9)
# Flat fee in micro-SOL
SOLANA = NetworkProfile("solana", "Solana", 15, 105, 1e6)

NETWORKS: tuple[NetworkProfile, ...] = (TRON, ETHEREUM, BSC, POLYGON, AVALANCHE, SOLANA)

# Basis points denominator of the TRON dynamic energy factor
ENERGY_FACTOR_SCALE = 1e4

# Fixed BSC gas price used when no oracle value is wanted
DEFAULT_BSC_GAS_PRICE_GWEI = 1.0

# Report windows, in days
DAY_WINDOW_DAYS = 1
WEEK_WINDOW_DAYS = 7

REPORT_TOKEN = "USDT"
MISSING_FEE_TEXT = "n/a"

# Default location of the SQLite database
DEFAULT_DB_PATH = "monitor.db"
