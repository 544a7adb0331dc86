"""Token quote sources."""

from urllib.parse import urlencode

from psm_monitor.fetch.client import HttpFetcher
from psm_monitor.sources.constants import (
    DEFAULT_QUOTE_URL,
    DEFAULT_SOL_PRICE_URL,
    SOURCE_QUOTE,
    SOURCE_SOL_QUOTE,
)
from psm_monitor.sources.helpers import find_path, parse_json, read_scalar, to_float
from psm_monitor.sources.models import Reading


class QuoteSource:
    """USD quotes for the native tokens of each tracked network."""

    def __init__(
        self,
        http_client: HttpFetcher,
        quote_url: str = DEFAULT_QUOTE_URL,
        sol_price_url: str = DEFAULT_SOL_PRICE_URL,
    ) -> None:
        """Initialize the quote source.

        Args:
            http_client: Retrying HTTP client.
            quote_url: Multi-symbol quote endpoint.
            sol_price_url: Solana quote endpoint.
        """
        self._http = http_client
        self._quote_url = quote_url
        self._sol_price_url = sol_price_url

    def get_price(self, symbol: str) -> Reading:
        """Get the USD price of a token symbol such as ``TRX``.

        Reads ``data.<SYMBOL>.quote.USD.price`` (a decimal string).

        Args:
            symbol: Token symbol.

        Returns:
            Reading with the price.
        """
        url = f"{self._quote_url}?{urlencode({'convert': 'USD', 'symbol': symbol})}"
        path = f"data.{symbol}.quote.USD.price"

        def read() -> float:
            document = parse_json(self._http.get(url), SOURCE_QUOTE)
            return to_float(find_path(document, path, SOURCE_QUOTE), path, SOURCE_QUOTE)

        return read_scalar(SOURCE_QUOTE, read, symbol=symbol)

    def get_sol_price(self) -> Reading:
        """Get the USD price of SOL.

        Returns:
            Reading with the price.
        """
        path = "solana.usd"

        def read() -> float:
            document = parse_json(self._http.get(self._sol_price_url), SOURCE_SOL_QUOTE)
            return to_float(
                find_path(document, path, SOURCE_SOL_QUOTE), path, SOURCE_SOL_QUOTE
            )

        return read_scalar(SOURCE_SOL_QUOTE, read)
