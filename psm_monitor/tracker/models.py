"""Data models for fee tracking."""

from datetime import UTC, datetime
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field

from psm_monitor.tracker.constants import NETWORKS, NetworkProfile


class FeeRange(BaseModel):
    """Estimated USD cost range of one transfer; None means no data."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    low: float | None = None
    high: float | None = None

    @property
    def known(self) -> bool:
        """Check if both bounds are present."""
        return self.low is not None and self.high is not None


class FeeFigures(BaseModel):
    """Low/high fee figures for every tracked network."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    tron_low_price: float | None = None
    tron_high_price: float | None = None
    eth_low_price: float | None = None
    eth_high_price: float | None = None
    bsc_low_price: float | None = None
    bsc_high_price: float | None = None
    polygon_low_price: float | None = None
    polygon_high_price: float | None = None
    avalanche_low_price: float | None = None
    avalanche_high_price: float | None = None
    solana_low_price: float | None = None
    solana_high_price: float | None = None

    def range_for(self, network: NetworkProfile) -> FeeRange:
        """Get the fee range of one network."""
        return FeeRange(
            low=getattr(self, f"{network.key}_low_price"),
            high=getattr(self, f"{network.key}_high_price"),
        )

    def missing_networks(self) -> list[str]:
        """Keys of the networks without a complete fee range."""
        return [
            network.key for network in NETWORKS if not self.range_for(network).known
        ]

    @staticmethod
    def columns() -> list[str]:
        """Column names of all figures, in network order."""
        return [
            f"{network.key}_{bound}_price"
            for network in NETWORKS
            for bound in ("low", "high")
        ]

    @classmethod
    def fields_from_ranges(
        cls, ranges: dict[str, FeeRange]
    ) -> dict[str, float | None]:
        """Flatten per-network ranges into column values.

        Args:
            ranges: Fee range keyed by network key.

        Returns:
            Mapping of column name to value; absent networks map to None.
        """
        fields: dict[str, float | None] = {}
        for network in NETWORKS:
            fee = ranges.get(network.key, FeeRange())
            fields[f"{network.key}_low_price"] = fee.low
            fields[f"{network.key}_high_price"] = fee.high
        return fields


class FeeRecord(FeeFigures):
    """One sampling tick."""

    tracked_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        description="When the sample was taken",
    )


class FeeAverages(FeeFigures):
    """Averages of all samples inside a time window."""

    window_start: datetime
    window_end: datetime
    samples: Annotated[int, Field(ge=0, description="Samples in the window")] = 0
