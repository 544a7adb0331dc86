"""Fee estimation formulas."""

from psm_monitor.tracker.constants import (
    ENERGY_FACTOR_SCALE,
    SOLANA,
    TRON,
    NetworkProfile,
)
from psm_monitor.tracker.models import FeeRange


def tron_fee_range(trx_price: float, energy_price: float, factor: float) -> FeeRange:
    """USD cost of a TRC-20 USDT transfer paid by burning TRX for energy.

    Args:
        trx_price: TRX price in USD.
        energy_price: Energy price in sun.
        factor: Dynamic energy factor in basis points.

    Returns:
        Low/high cost range.
    """
    unit_cost = trx_price * energy_price * (1 + factor / ENERGY_FACTOR_SCALE)
    return FeeRange(
        low=unit_cost * TRON.low_units / TRON.scale,
        high=unit_cost * TRON.high_units / TRON.scale,
    )


def evm_fee_range(
    network: NetworkProfile, token_price: float, gas_price_gwei: float
) -> FeeRange:
    """USD cost of an ERC-20 style USDT transfer.

    Args:
        network: EVM network profile.
        token_price: Native token price in USD.
        gas_price_gwei: Gas price in gwei.

    Returns:
        Low/high cost range.
    """
    unit_cost = token_price * gas_price_gwei
    return FeeRange(
        low=unit_cost * network.low_units / network.scale,
        high=unit_cost * network.high_units / network.scale,
    )


def solana_fee_range(sol_price: float) -> FeeRange:
    """USD cost of an SPL USDT transfer.

    Args:
        sol_price: SOL price in USD.

    Returns:
        Low/high cost range.
    """
    return FeeRange(
        low=sol_price * SOLANA.low_units / SOLANA.scale,
        high=sol_price * SOLANA.high_units / SOLANA.scale,
    )
