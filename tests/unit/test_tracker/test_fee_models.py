"""Unit tests for fee tracking models."""

from psm_monitor.tracker.constants import NETWORKS, SOLANA, TRON
from psm_monitor.tracker.models import FeeFigures, FeeRange, FeeRecord
from tests.helpers.time import FIXED_NOW


class TestFeeRange:
    """Tests for FeeRange."""

    def test_known(self) -> None:
        """Test a range with both bounds is known."""
        assert FeeRange(low=1.0, high=2.0).known

    def test_unknown(self) -> None:
        """Test a range with a missing bound is unknown."""
        assert not FeeRange().known
        assert not FeeRange(low=1.0).known


class TestFeeFigures:
    """Tests for the per-network figure layout."""

    def test_twelve_columns(self) -> None:
        """Test one low and one high column per network."""
        columns = FeeFigures.columns()

        assert len(columns) == 2 * len(NETWORKS) == 12
        assert columns[:2] == ["tron_low_price", "tron_high_price"]
        assert columns[-2:] == ["solana_low_price", "solana_high_price"]

    def test_fields_from_ranges(self) -> None:
        """Test absent networks map to None."""
        fields = FeeFigures.fields_from_ranges({"tron": FeeRange(low=1.0, high=2.0)})

        assert fields["tron_low_price"] == 1.0
        assert fields["tron_high_price"] == 2.0
        assert fields["eth_low_price"] is None
        assert set(fields) == set(FeeFigures.columns())

    def test_range_for_and_missing(self) -> None:
        """Test per-network access and the missing list."""
        record = FeeRecord(
            tracked_at=FIXED_NOW,
            **FeeFigures.fields_from_ranges(
                {
                    network.key: FeeRange(low=1.0, high=2.0)
                    for network in NETWORKS
                    if network is not SOLANA
                }
            ),
        )

        assert record.range_for(TRON) == FeeRange(low=1.0, high=2.0)
        assert record.missing_networks() == ["solana"]
