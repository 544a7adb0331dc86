"""JSON-RPC client for the event server."""

import structlog
from pydantic import ValidationError

from psm_monitor.fetch.client import HttpFetcher
from psm_monitor.fetch.errors import HttpFailedError
from psm_monitor.sources.constants import (
    JSONRPC_PATH,
    JSONRPC_REQUEST_ID,
    JSONRPC_VERSION,
    METHOD_BLOCK_NUMBER,
    SOURCE_JSONRPC,
)
from psm_monitor.sources.errors import NoReturnError, ParseError, SourceError
from psm_monitor.sources.models import JsonRpcMessage


logger = structlog.get_logger()


def encode_params(params: bytes | None) -> str:
    """Encode raw params as uppercase hex without a prefix."""
    return params.hex().upper() if params else ""


def decode_hex_result(result: str) -> bytes:
    """Decode a ``0x``-prefixed hex result.

    Odd-length payloads are left-padded with one zero nibble, so
    ``0x123`` decodes like ``0x0123``.

    Args:
        result: Hex string from the response.

    Returns:
        Decoded bytes.

    Raises:
        ParseError: If the string is not valid prefixed hex.
    """
    if not result.startswith(("0x", "0X")):
        msg = f"Result is not 0x-prefixed hex: {result!r}"
        raise ParseError(msg, source_id=SOURCE_JSONRPC)

    digits = result[2:]
    if len(digits) % 2 == 1:
        digits = "0" + digits

    try:
        return bytes.fromhex(digits)
    except ValueError as e:
        msg = f"Result is not valid hex: {result!r}"
        raise ParseError(msg, source_id=SOURCE_JSONRPC) from e


def build_message(method: str, params: bytes | None = None) -> JsonRpcMessage:
    """Build a request envelope."""
    return JsonRpcMessage(
        jsonrpc=JSONRPC_VERSION,
        id=JSONRPC_REQUEST_ID,
        method=method,
        params=encode_params(params),
    )


class JsonRpcClient:
    """Minimal JSON-RPC client posting to ``{event_server}jsonrpc``."""

    def __init__(self, http_client: HttpFetcher, event_server: str) -> None:
        """Initialize the client.

        Args:
            http_client: Retrying HTTP client.
            event_server: Event server base URL (with trailing slash).
        """
        self._http = http_client
        self._url = event_server + JSONRPC_PATH

    def call(self, method: str, params: bytes | None = None) -> bytes:
        """Call a JSON-RPC method and decode its hex result.

        Args:
            method: RPC method name.
            params: Raw params, sent hex encoded.

        Returns:
            Decoded result bytes.

        Raises:
            HttpFailedError: If the request exhausted its retries.
            SourceError: If the response cannot be decoded.
        """
        message = build_message(method, params)
        body = self._http.post(
            self._url,
            message.model_dump(exclude_none=True),
        )

        try:
            response = JsonRpcMessage.model_validate_json(body)
        except ValidationError as e:
            msg = f"Invalid JSON-RPC response: {e.error_count()} errors"
            raise ParseError(msg, source_id=SOURCE_JSONRPC) from e

        if response.result is None:
            raise NoReturnError(source_id=SOURCE_JSONRPC)

        return decode_hex_result(response.result)

    def block_number(self) -> int:
        """Get the latest block number.

        Returns:
            Block height, or 0 if it could not be read.
        """
        try:
            return int.from_bytes(self.call(METHOD_BLOCK_NUMBER), "big")
        except (HttpFailedError, SourceError) as e:
            logger.warning(
                "block_number_failed",
                component="sources",
                source_id=SOURCE_JSONRPC,
                error=str(e),
            )
            return 0
