"""Fee sampler: one tick of quote and gas collection."""

from collections.abc import Callable
from datetime import UTC, datetime

import structlog

from psm_monitor.sources.chain import ChainParameterSource
from psm_monitor.sources.constants import CHAIN_ETHEREUM, CHAIN_POLYGON
from psm_monitor.sources.gas import GasSource
from psm_monitor.sources.models import PairReading, Reading
from psm_monitor.sources.quotes import QuoteSource
from psm_monitor.tracker.constants import (
    AVALANCHE,
    BSC,
    DEFAULT_BSC_GAS_PRICE_GWEI,
    ETHEREUM,
    POLYGON,
    SOLANA,
    TRON,
    NetworkProfile,
)
from psm_monitor.tracker.formulas import evm_fee_range, solana_fee_range, tron_fee_range
from psm_monitor.tracker.models import FeeRange, FeeRecord
from psm_monitor.tracker.store import FeeStore


logger = structlog.get_logger()


def _failed_inputs(readings: dict[str, Reading | PairReading]) -> list[str]:
    """Names of the readings that carry an error."""
    return [name for name, reading in readings.items() if not reading.ok]


class FeeSampler:
    """Samples every network and persists one FeeRecord per tick.

    A network whose inputs could not all be read is stored as NULL
    rather than as a zero-cost estimate.
    """

    def __init__(  # noqa: PLR0913
        self,
        store: FeeStore,
        quotes: QuoteSource,
        gas: GasSource,
        chain: ChainParameterSource,
        bsc_gas_price_gwei: float = DEFAULT_BSC_GAS_PRICE_GWEI,
        clock: Callable[[], datetime] = lambda: datetime.now(UTC),
    ) -> None:
        """Initialize the sampler.

        Args:
            store: Open fee store.
            quotes: Token quote source.
            gas: Gas price source.
            chain: TRON chain parameter source.
            bsc_gas_price_gwei: Gas price assumed for BSC.
            clock: Returns the current time.
        """
        self._store = store
        self._quotes = quotes
        self._gas = gas
        self._chain = chain
        self._bsc_gas_price_gwei = bsc_gas_price_gwei
        self._clock = clock
        self._log = logger.bind(component="tracker")

    def sample(self) -> FeeRecord:
        """Collect all inputs and compute one record without storing it.

        Sources are queried one after another.

        Returns:
            The computed record.
        """
        ranges = {
            TRON.key: self._sample_tron(),
            ETHEREUM.key: self._sample_evm(
                ETHEREUM,
                self._quotes.get_price("ETH"),
                self._gas.get_gas_price(CHAIN_ETHEREUM),
            ),
            BSC.key: self._sample_evm(
                BSC,
                self._quotes.get_price("BNB"),
                Reading(value=self._bsc_gas_price_gwei),
            ),
            POLYGON.key: self._sample_evm(
                POLYGON,
                self._quotes.get_price("POL"),
                self._gas.get_gas_price(CHAIN_POLYGON),
            ),
            AVALANCHE.key: self._sample_evm(
                AVALANCHE,
                self._quotes.get_price("AVAX"),
                self._gas.get_avalanche_gas_price(),
            ),
            SOLANA.key: self._sample_solana(),
        }

        return FeeRecord(
            tracked_at=self._clock(),
            **FeeRecord.fields_from_ranges(ranges),
        )

    def track(self) -> FeeRecord:
        """Sample all networks and persist the record.

        Returns:
            The stored record.
        """
        record = self.sample()
        record_id = self._store.insert_record(record)
        self._log.info(
            "fees_tracked",
            record_id=record_id,
            tracked_at=record.tracked_at.isoformat(),
            missing=record.missing_networks(),
        )
        return record

    def _sample_tron(self) -> FeeRange:
        trx_price = self._quotes.get_price("TRX")
        parameters = self._chain.get_energy_price_and_factor()
        if not self._inputs_ok(TRON, {"price": trx_price, "chain_parameters": parameters}):
            return FeeRange()

        energy_price, factor = parameters.value
        return tron_fee_range(trx_price.value, energy_price, factor)

    def _sample_evm(
        self, network: NetworkProfile, price: Reading, gas_price: Reading
    ) -> FeeRange:
        if not self._inputs_ok(network, {"price": price, "gas_price": gas_price}):
            return FeeRange()
        return evm_fee_range(network, price.value, gas_price.value)

    def _sample_solana(self) -> FeeRange:
        price = self._quotes.get_sol_price()
        if not self._inputs_ok(SOLANA, {"price": price}):
            return FeeRange()
        return solana_fee_range(price.value)

    def _inputs_ok(
        self, network: NetworkProfile, readings: dict[str, Reading | PairReading]
    ) -> bool:
        """Check the readings of one network, logging the ones that failed."""
        failed = _failed_inputs(readings)
        if failed:
            self._log.warning("fee_input_missing", network=network.key, inputs=failed)
            return False
        return True
