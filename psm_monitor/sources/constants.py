"""Constants for quote, gas, and chain data sources."""

# Quote endpoints
DEFAULT_QUOTE_URL = "https://c.tronlink.org/v1/cryptocurrency/getprice"
DEFAULT_SOL_PRICE_URL = (
    "https://api.coingecko.com/api/v3/simple/price?ids=solana&vs_currencies=usd"
)

# Gas oracle endpoints, keyed by chain name
CHAIN_ETHEREUM = "Ethereum"
CHAIN_BSC = "BSC"
CHAIN_POLYGON = "Polygon"

GAS_ORACLE_URLS: dict[str, str] = {
    CHAIN_ETHEREUM: "https://api.etherscan.io/api?module=gastracker&action=gasoracle",
    CHAIN_BSC: "https://api.bscscan.com/api?module=gastracker&action=gasoracle",
    CHAIN_POLYGON: "https://api.polygonscan.com/api?module=gastracker&action=gasoracle",
}

AVALANCHE_GAS_URL = "https://api.owlracle.info/v4/avax/gas"

# Speed tiers with acceptance strictly inside this range are selected
AVALANCHE_MIN_ACCEPTANCE = 0.5
AVALANCHE_MAX_ACCEPTANCE = 1.0

# TRON full node
PARAMETERS_PATH = "wallet/getchainparameters"
TRIGGER_PATH = "wallet/triggerconstantcontract"
ENERGY_FEE_PARAMETER = "getEnergyFee"
ENERGY_FACTOR_PARAMETER = "getDynamicEnergyMaxFactor"

# Legacy positions of the two parameters when records carry no keys
ENERGY_FEE_INDEX = 11
ENERGY_FACTOR_INDEX = 62

# Constant calls are simulated from this well-known address
TRIGGER_OWNER_ADDRESS = "T9yD14Nj9j7xAB4dbGeiX9h8unkKHxuWwb"

# Tronscan
TX_INFO_URL = "https://apilist.tronscanapi.com/api/transaction-info"

# JSON-RPC
JSONRPC_PATH = "jsonrpc"
JSONRPC_VERSION = "2.0"
JSONRPC_REQUEST_ID = 233
METHOD_BLOCK_NUMBER = "eth_blockNumber"

# Source identifiers used in logs and error records
SOURCE_QUOTE = "quote"
SOURCE_SOL_QUOTE = "sol_quote"
SOURCE_GAS_ORACLE = "gas_oracle"
SOURCE_AVALANCHE_GAS = "avalanche_gas"
SOURCE_CHAIN_PARAMETERS = "chain_parameters"
SOURCE_JSONRPC = "jsonrpc"
SOURCE_TRIGGER = "trigger"
SOURCE_TX_INFO = "tx_info"
