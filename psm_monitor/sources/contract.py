"""Constant contract calls and transaction lookups on TRON."""

import structlog
from pydantic import ValidationError

from psm_monitor.fetch.client import HttpFetcher
from psm_monitor.fetch.errors import HttpFailedError
from psm_monitor.sources.constants import (
    SOURCE_TRIGGER,
    SOURCE_TX_INFO,
    TRIGGER_OWNER_ADDRESS,
    TRIGGER_PATH,
    TX_INFO_URL,
)
from psm_monitor.sources.errors import (
    NoReturnError,
    QueryFailedError,
    SourceError,
)
from psm_monitor.sources.helpers import find_path, parse_json
from psm_monitor.sources.models import TriggerRequest, TriggerResponse


logger = structlog.get_logger()


class ContractClient:
    """Read-only contract access through a TRON full node."""

    def __init__(
        self,
        http_client: HttpFetcher,
        full_node: str,
        tx_info_url: str = TX_INFO_URL,
    ) -> None:
        """Initialize the contract client.

        Args:
            http_client: Retrying HTTP client.
            full_node: Full node base URL (with trailing slash).
            tx_info_url: Tronscan transaction-info endpoint.
        """
        self._http = http_client
        self._full_node = full_node
        self._tx_info_url = tx_info_url

    def trigger(self, contract_address: str, selector: str, parameter: str) -> str:
        """Run a constant (read-only) contract call.

        Args:
            contract_address: Target contract (base58).
            selector: Function selector, e.g. ``balanceOf(address)``.
            parameter: ABI-encoded parameter blob in hex.

        Returns:
            First hex word returned by the call.

        Raises:
            HttpFailedError: If the request exhausted its retries.
            QueryFailedError: If the node reports the call as failed.
            NoReturnError: If the call returned nothing.
        """
        request = TriggerRequest(
            owner_address=TRIGGER_OWNER_ADDRESS,
            contract_address=contract_address,
            function_selector=selector,
            parameter=parameter,
            visible=True,
        )
        body = self._http.post(self._full_node + TRIGGER_PATH, request)

        try:
            response = TriggerResponse.model_validate_json(body)
        except ValidationError:
            response = TriggerResponse()

        if not response.result.result:
            raise QueryFailedError(source_id=SOURCE_TRIGGER)
        if not response.constant_result:
            raise NoReturnError(source_id=SOURCE_TRIGGER)
        return response.constant_result[0]

    def get_tx_from(self, tx_id: str) -> str:
        """Look up the sender address of a transaction.

        Args:
            tx_id: Transaction hash.

        Returns:
            Owner address, or an empty string if it could not be read.
        """
        try:
            body = self._http.get(f"{self._tx_info_url}?hash={tx_id}")
            document = parse_json(body, SOURCE_TX_INFO)
            owner = find_path(document, "ownerAddress", SOURCE_TX_INFO)
        except (HttpFailedError, SourceError) as e:
            logger.warning(
                "tx_lookup_failed",
                component="sources",
                source_id=SOURCE_TX_INFO,
                tx_id=tx_id,
                error=str(e),
            )
            return ""

        return owner if isinstance(owner, str) else ""
