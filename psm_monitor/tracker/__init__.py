"""Fee tracking: sampling, persistence, and periodic reports."""

from psm_monitor.tracker.constants import NETWORKS, NetworkProfile
from psm_monitor.tracker.errors import (
    DatabaseError,
    FeeStoreError,
    MigrationError,
    StoreNotConnectedError,
)
from psm_monitor.tracker.formulas import (
    evm_fee_range,
    solana_fee_range,
    tron_fee_range,
)
from psm_monitor.tracker.models import FeeAverages, FeeFigures, FeeRange, FeeRecord
from psm_monitor.tracker.report import FeeReporter, Notifier, format_report
from psm_monitor.tracker.sampler import FeeSampler
from psm_monitor.tracker.store import FeeStore


__all__ = [
    "NETWORKS",
    "FeeAverages",
    "FeeFigures",
    "FeeRange",
    "FeeRecord",
    "FeeReporter",
    "FeeSampler",
    "FeeStore",
    "DatabaseError",
    "FeeStoreError",
    "MigrationError",
    "NetworkProfile",
    "Notifier",
    "StoreNotConnectedError",
    "evm_fee_range",
    "format_report",
    "solana_fee_range",
    "tron_fee_range",
]
