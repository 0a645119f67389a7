"""Pydantic v2 configuration schema with strict validation."""

from decimal import Decimal
from enum import StrEnum

from pydantic import BaseModel, Field


class ExecutionMode(StrEnum):
    DRY_RUN = "dry-run"
    LIVE = "live"


class VenueConfig(BaseModel):
    model_config = {"extra": "forbid"}

    base_url: str = "https://api.binance.com"
    timeout_seconds: float = Field(default=10.0, gt=0.0)
    recv_window_ms: int = Field(default=5000, ge=1, le=60000)
    quote_asset: str = Field(default="USDT", min_length=1)


class ScheduleConfig(BaseModel):
    model_config = {"extra": "forbid"}

    quantum: Decimal = Field(default=Decimal("1"), gt=0)
    default_duration: str = "1H"
    default_symbol: str = "BTCUSDT"


class ExecutionConfig(BaseModel):
    model_config = {"extra": "forbid"}

    mode: ExecutionMode = ExecutionMode.DRY_RUN


class DryRunConfig(BaseModel):
    """Simulated venue state used when mode is dry-run."""

    model_config = {"extra": "forbid"}

    price: Decimal = Field(default=Decimal("50000"), gt=0)
    balances: dict[str, Decimal] = {"USDT": Decimal("1000"), "BTC": Decimal("0.02")}
    fail_every: int = Field(default=0, ge=0)


class EngineConfig(BaseModel):
    model_config = {"extra": "forbid"}

    venue: VenueConfig = VenueConfig()
    schedule: ScheduleConfig = ScheduleConfig()
    execution: ExecutionConfig = ExecutionConfig()
    dry_run: DryRunConfig = DryRunConfig()
