"""Gas price sources for EVM networks."""

from collections.abc import Iterable, Mapping

import structlog
from pydantic import ValidationError

from psm_monitor.fetch.client import HttpFetcher
from psm_monitor.sources.constants import (
    AVALANCHE_GAS_URL,
    AVALANCHE_MAX_ACCEPTANCE,
    AVALANCHE_MIN_ACCEPTANCE,
    GAS_ORACLE_URLS,
    SOURCE_AVALANCHE_GAS,
    SOURCE_GAS_ORACLE,
)
from psm_monitor.sources.errors import (
    ErrorRecord,
    ParseError,
    SourceError,
    SourceErrorClass,
)
from psm_monitor.sources.helpers import find_path, parse_json, read_scalar, to_float
from psm_monitor.sources.models import AvalancheGasResponse, AvalancheSpeed, Reading


logger = structlog.get_logger()


def with_api_key(url: str, api_key: str | None) -> str:
    """Append an ``apikey`` query parameter when a key is configured."""
    if not api_key:
        return url
    separator = "&" if "?" in url else "?"
    return f"{url}{separator}apikey={api_key}"


def select_avalanche_fee(speeds: Iterable[AvalancheSpeed]) -> float | None:
    """Pick the max fee of the first tier with acceptance in (0.5, 1.0).

    Later tiers are ignored even if their acceptance is higher.

    Args:
        speeds: Speed tiers in oracle order.

    Returns:
        The tier's max fee per gas, or None if no tier qualifies.
    """
    for speed in speeds:
        if AVALANCHE_MIN_ACCEPTANCE < speed.acceptance < AVALANCHE_MAX_ACCEPTANCE:
            return speed.max_fee_per_gas
    return None


class GasSource:
    """Proposed gas prices from block explorer oracles and Owlracle."""

    def __init__(
        self,
        http_client: HttpFetcher,
        api_keys: Mapping[str, str | None] | None = None,
        avalanche_api_key: str | None = None,
        oracle_urls: Mapping[str, str] | None = None,
        avalanche_url: str = AVALANCHE_GAS_URL,
    ) -> None:
        """Initialize the gas source.

        Args:
            http_client: Retrying HTTP client.
            api_keys: Explorer API key per chain name.
            avalanche_api_key: Owlracle API key.
            oracle_urls: Gas oracle URL per chain name.
            avalanche_url: Owlracle gas endpoint.
        """
        self._http = http_client
        self._api_keys = dict(api_keys or {})
        self._avalanche_api_key = avalanche_api_key
        self._oracle_urls = dict(oracle_urls or GAS_ORACLE_URLS)
        self._avalanche_url = avalanche_url

    @property
    def supported_chains(self) -> list[str]:
        """Chains with a configured gas oracle."""
        return sorted(self._oracle_urls)

    def get_gas_price(self, chain: str) -> Reading:
        """Get the proposed gas price (gwei) for an explorer-backed chain.

        Args:
            chain: Chain name, one of ``Ethereum``, ``BSC``, ``Polygon``.

        Returns:
            Reading with the gas price.
        """
        endpoint = self._oracle_urls.get(chain)
        if endpoint is None:
            error = SourceError(
                SourceErrorClass.SCHEMA,
                f"Unsupported chain: {chain}",
                source_id=SOURCE_GAS_ORACLE,
            )
            return Reading(error=ErrorRecord.from_exception(error))

        url = with_api_key(endpoint, self._api_keys.get(chain))
        path = "result.ProposeGasPrice"

        def read() -> float:
            document = parse_json(self._http.get(url), SOURCE_GAS_ORACLE)
            return to_float(
                find_path(document, path, SOURCE_GAS_ORACLE), path, SOURCE_GAS_ORACLE
            )

        return read_scalar(SOURCE_GAS_ORACLE, read, chain=chain)

    def get_avalanche_gas_price(self) -> Reading:
        """Get the Avalanche max fee per gas (gwei).

        Returns:
            Reading with the fee of the first qualifying speed tier.
        """
        url = with_api_key(self._avalanche_url, self._avalanche_api_key)

        def read() -> float:
            body = self._http.get(url)
            try:
                response = AvalancheGasResponse.model_validate_json(body)
            except ValidationError as e:
                logger.warning(
                    "avalanche_speeds_malformed",
                    component="sources",
                    error_count=e.error_count(),
                )
                msg = f"Malformed Avalanche gas response: {e.error_count()} errors"
                raise ParseError(msg, source_id=SOURCE_AVALANCHE_GAS) from e

            fee = select_avalanche_fee(response.speeds)
            if fee is None:
                msg = (
                    "No speed tier with acceptance in "
                    f"({AVALANCHE_MIN_ACCEPTANCE}, {AVALANCHE_MAX_ACCEPTANCE})"
                )
                raise SourceError(
                    SourceErrorClass.NO_RETURN, msg, source_id=SOURCE_AVALANCHE_GAS
                )
            return fee

        return read_scalar(SOURCE_AVALANCHE_GAS, read)
