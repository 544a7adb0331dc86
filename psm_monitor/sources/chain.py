"""TRON chain parameter source."""

from typing import Any

import structlog

from psm_monitor.fetch.client import HttpFetcher
from psm_monitor.fetch.errors import HttpFailedError
from psm_monitor.sources.constants import (
    ENERGY_FACTOR_INDEX,
    ENERGY_FACTOR_PARAMETER,
    ENERGY_FEE_INDEX,
    ENERGY_FEE_PARAMETER,
    PARAMETERS_PATH,
    SOURCE_CHAIN_PARAMETERS,
)
from psm_monitor.sources.errors import (
    ErrorRecord,
    SchemaError,
    SourceError,
    SourceErrorClass,
)
from psm_monitor.sources.helpers import find_path, parse_json, to_float
from psm_monitor.sources.models import PairReading


logger = structlog.get_logger()

# The node omits "value" for parameters that are zero
_MISSING_VALUE = 0


def _parameter_value(record: Any, label: str) -> float:
    """Read the numeric value of one parameter record."""
    if not isinstance(record, dict):
        msg = f"Parameter record for {label} is not an object"
        raise SchemaError(msg, source_id=SOURCE_CHAIN_PARAMETERS, field=label)
    return to_float(
        record.get("value", _MISSING_VALUE), f"{label}.value", SOURCE_CHAIN_PARAMETERS
    )


def extract_energy_parameters(
    document: Any,
    fee_name: str = ENERGY_FEE_PARAMETER,
    factor_name: str = ENERGY_FACTOR_PARAMETER,
) -> tuple[float, float]:
    """Extract the energy price and the energy scaling factor.

    Records are matched by their ``key``. Payloads whose records carry
    no keys are read from the legacy fixed positions instead.

    Args:
        document: Decoded ``getchainparameters`` response.
        fee_name: Parameter key of the energy price.
        factor_name: Parameter key of the scaling factor.

    Returns:
        Tuple of (energy price in sun, factor in basis points).

    Raises:
        SchemaError: If either parameter cannot be found.
    """
    records = find_path(document, "chainParameter", SOURCE_CHAIN_PARAMETERS)
    if not isinstance(records, list):
        msg = "Field 'chainParameter' is not an array"
        raise SchemaError(msg, source_id=SOURCE_CHAIN_PARAMETERS, field="chainParameter")

    by_name = {
        record["key"]: record
        for record in records
        if isinstance(record, dict) and isinstance(record.get("key"), str)
    }

    if by_name:
        for name in (fee_name, factor_name):
            if name not in by_name:
                msg = f"Chain parameter '{name}' not found"
                raise SchemaError(msg, source_id=SOURCE_CHAIN_PARAMETERS, field=name)
        return (
            _parameter_value(by_name[fee_name], fee_name),
            _parameter_value(by_name[factor_name], factor_name),
        )

    required = max(ENERGY_FEE_INDEX, ENERGY_FACTOR_INDEX) + 1
    if len(records) < required:
        msg = (
            f"Field 'chainParameter' has {len(records)} entries, "
            f"expected at least {required}"
        )
        raise SchemaError(msg, source_id=SOURCE_CHAIN_PARAMETERS, field="chainParameter")

    return (
        _parameter_value(records[ENERGY_FEE_INDEX], f"chainParameter[{ENERGY_FEE_INDEX}]"),
        _parameter_value(
            records[ENERGY_FACTOR_INDEX], f"chainParameter[{ENERGY_FACTOR_INDEX}]"
        ),
    )


class ChainParameterSource:
    """Energy pricing parameters from a TRON full node."""

    def __init__(self, http_client: HttpFetcher, full_node: str) -> None:
        """Initialize the chain parameter source.

        Args:
            http_client: Retrying HTTP client.
            full_node: Full node base URL (with trailing slash).
        """
        self._http = http_client
        self._full_node = full_node

    def get_energy_price_and_factor(self) -> PairReading:
        """Get the energy price and the dynamic energy factor.

        Returns:
            PairReading with (energy price, factor), (0, 0) on failure.
        """
        try:
            body = self._http.get(self._full_node + PARAMETERS_PATH)
            document = parse_json(body, SOURCE_CHAIN_PARAMETERS)
            return PairReading(value=extract_energy_parameters(document))
        except HttpFailedError as e:
            error = SourceError(
                SourceErrorClass.FETCH, str(e), source_id=SOURCE_CHAIN_PARAMETERS
            )
        except SourceError as e:
            error = e

        logger.warning(
            "source_read_failed",
            component="sources",
            source_id=SOURCE_CHAIN_PARAMETERS,
            error_class=error.error_class.value,
            error=error.message,
        )
        return PairReading(error=ErrorRecord.from_exception(error))
