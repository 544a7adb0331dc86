"""Result models for the data sources."""

from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field

from psm_monitor.sources.errors import ErrorRecord


class Reading(BaseModel):
    """Scalar read from a source, or the reason it could not be read.

    ``value`` is 0.0 whenever ``error`` is set; check ``ok`` before
    treating the value as real data.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    value: float = 0.0
    error: ErrorRecord | None = None

    @property
    def ok(self) -> bool:
        """Check if the value was actually read."""
        return self.error is None

    def value_or_none(self) -> float | None:
        """Return the value, or None if the read failed."""
        return self.value if self.ok else None


class PairReading(BaseModel):
    """Two values read together from one document."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    value: tuple[float, float] = (0.0, 0.0)
    error: ErrorRecord | None = None

    @property
    def ok(self) -> bool:
        """Check if both values were actually read."""
        return self.error is None


class AvalancheSpeed(BaseModel):
    """One speed tier of the Avalanche gas oracle."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    acceptance: float = 0.0
    max_fee_per_gas: float = Field(default=0.0, alias="maxFeePerGas")
    max_priority_fee_per_gas: float = Field(default=0.0, alias="maxPriorityFeePerGas")
    base_fee: float = Field(default=0.0, alias="baseFee")
    estimated_fee: float = Field(default=0.0, alias="estimatedFee")


class AvalancheGasResponse(BaseModel):
    """Avalanche gas oracle response."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    timestamp: str = ""
    last_block: int = Field(default=0, alias="lastBlock")
    avg_time: float = Field(default=0.0, alias="avgTime")
    avg_tx: float = Field(default=0.0, alias="avgTx")
    avg_gas: float = Field(default=0.0, alias="avgGas")
    speeds: list[AvalancheSpeed] = Field(default_factory=list)


class JsonRpcMessage(BaseModel):
    """JSON-RPC envelope used for both requests and responses."""

    model_config = ConfigDict(extra="ignore")

    jsonrpc: str = "2.0"
    id: int = 0
    method: str | None = None
    params: str | None = None
    result: str | None = None


class TriggerRequest(BaseModel):
    """Constant contract call request for the TRON full node."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    owner_address: Annotated[str, Field(min_length=1)]
    contract_address: Annotated[str, Field(min_length=1)]
    function_selector: Annotated[str, Field(min_length=1)]
    parameter: str = ""
    visible: bool = True


class TriggerResult(BaseModel):
    """Node verdict on a constant contract call."""

    model_config = ConfigDict(extra="ignore")

    result: bool = False


class TriggerResponse(BaseModel):
    """Constant contract call response."""

    model_config = ConfigDict(extra="ignore")

    result: TriggerResult = Field(default_factory=TriggerResult)
    constant_result: list[str] = Field(default_factory=list)
