"""Quote, gas, and chain data sources built on the fetch layer."""

from psm_monitor.sources.chain import ChainParameterSource, extract_energy_parameters
from psm_monitor.sources.contract import ContractClient
from psm_monitor.sources.errors import (
    ErrorRecord,
    NoReturnError,
    ParseError,
    QueryFailedError,
    SchemaError,
    SourceError,
    SourceErrorClass,
)
from psm_monitor.sources.gas import GasSource, select_avalanche_fee
from psm_monitor.sources.jsonrpc import JsonRpcClient, decode_hex_result
from psm_monitor.sources.models import AvalancheSpeed, PairReading, Reading
from psm_monitor.sources.quotes import QuoteSource


__all__ = [
    # Sources
    "ChainParameterSource",
    "ContractClient",
    "GasSource",
    "JsonRpcClient",
    "QuoteSource",
    # Helpers
    "decode_hex_result",
    "extract_energy_parameters",
    "select_avalanche_fee",
    # Models
    "AvalancheSpeed",
    "PairReading",
    "Reading",
    # Errors
    "ErrorRecord",
    "NoReturnError",
    "ParseError",
    "QueryFailedError",
    "SchemaError",
    "SourceError",
    "SourceErrorClass",
]
