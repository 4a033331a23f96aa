"""Request schema dataclasses and JSON loading."""

from __future__ import annotations

from dataclasses import dataclass, field
import json
from pathlib import Path
from typing import Any

from .withdrawals import (
    FixedWithdrawal,
    GuardrailsWithdrawal,
    InvalidPolicyConfiguration,
    PercentageWithdrawal,
    VariableWithdrawal,
    WithdrawalPolicy,
)


class SchemaError(ValueError):
    """Raised when raw JSON cannot be parsed into schema objects."""


def _expect_dict(value: Any, path: str) -> dict[str, Any]:
    if not isinstance(value, dict):
        raise SchemaError(f"{path}: expected object")
    return value


def _expect_list(value: Any, path: str) -> list[Any]:
    if not isinstance(value, list):
        raise SchemaError(f"{path}: expected array")
    return value


def _require(data: dict[str, Any], key: str, path: str) -> Any:
    if key not in data:
        raise SchemaError(f"{path}.{key}: missing required field")
    return data[key]


def _optional(data: dict[str, Any], key: str, default: Any = None) -> Any:
    return data.get(key, default)


def _optional_int(data: dict[str, Any], key: str) -> int | None:
    value = _optional(data, key)
    return None if value is None else int(value)


@dataclass(frozen=True, slots=True)
class RebalancingSettings:
    strategy: str = "none"
    frequency_months: int | None = None
    threshold_pct: float | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any], path: str) -> "RebalancingSettings":
        threshold = _optional(data, "threshold_pct")
        return cls(
            strategy=_optional(data, "strategy", "none"),
            frequency_months=_optional_int(data, "frequency_months"),
            threshold_pct=None if threshold is None else float(threshold),
        )


@dataclass(frozen=True, slots=True)
class ThresholdRange:
    low: float
    high: float

    @classmethod
    def from_dict(cls, data: dict[str, Any], path: str) -> "ThresholdRange":
        return cls(low=float(_require(data, "low", path)), high=float(_require(data, "high", path)))


@dataclass(frozen=True, slots=True)
class DynamicAllocation:
    enabled: bool = False
    type: str = "dividend"
    dividend_thresholds: ThresholdRange = field(default_factory=lambda: ThresholdRange(low=2.0, high=4.0))
    valuation_thresholds: ThresholdRange = field(default_factory=lambda: ThresholdRange(low=15.0, high=25.0))

    @classmethod
    def from_dict(cls, data: dict[str, Any], path: str) -> "DynamicAllocation":
        defaults = cls()
        dividend_raw = _optional(data, "dividend_thresholds")
        valuation_raw = _optional(data, "valuation_thresholds")
        return cls(
            enabled=bool(_optional(data, "enabled", False)),
            type=_optional(data, "type", "dividend"),
            dividend_thresholds=defaults.dividend_thresholds
            if dividend_raw is None
            else ThresholdRange.from_dict(_expect_dict(dividend_raw, f"{path}.dividend_thresholds"), f"{path}.dividend_thresholds"),
            valuation_thresholds=defaults.valuation_thresholds
            if valuation_raw is None
            else ThresholdRange.from_dict(_expect_dict(valuation_raw, f"{path}.valuation_thresholds"), f"{path}.valuation_thresholds"),
        )


@dataclass(frozen=True, slots=True)
class PortfolioConfig:
    initial_balance: float
    stock_allocation_pct: float
    bond_allocation_pct: float
    # Accepted and validated, not consumed by the engine.
    rebalancing: RebalancingSettings = field(default_factory=RebalancingSettings)
    dynamic_allocation: DynamicAllocation = field(default_factory=DynamicAllocation)

    @classmethod
    def from_dict(cls, data: dict[str, Any], path: str = "portfolio") -> "PortfolioConfig":
        return cls(
            initial_balance=float(_require(data, "initial_balance", path)),
            stock_allocation_pct=float(_require(data, "stock_allocation_pct", path)),
            bond_allocation_pct=float(_require(data, "bond_allocation_pct", path)),
            rebalancing=RebalancingSettings.from_dict(
                _expect_dict(_optional(data, "rebalancing", {}), f"{path}.rebalancing"), f"{path}.rebalancing"
            ),
            dynamic_allocation=DynamicAllocation.from_dict(
                _expect_dict(_optional(data, "dynamic_allocation", {}), f"{path}.dynamic_allocation"),
                f"{path}.dynamic_allocation",
            ),
        )


def _labels(data: dict[str, Any]) -> dict[str, Any]:
    return {"name": _optional(data, "name"), "description": _optional(data, "description")}


def policy_from_dict(data: dict[str, Any], path: str = "withdrawal_policy") -> WithdrawalPolicy:
    """Parse a tagged withdrawal policy object keyed by its ``type`` field."""
    kind = _require(data, "type", path)
    if kind == "fixed":
        return FixedWithdrawal(
            amount=float(_require(data, "amount", path)),
            adjust_for_inflation=bool(_optional(data, "adjust_for_inflation", False)),
            **_labels(data),
        )
    if kind == "percentage":
        return PercentageWithdrawal(rate_pct=float(_require(data, "rate_pct", path)), **_labels(data))
    if kind == "variable":
        return VariableWithdrawal(
            base_amount=float(_require(data, "base_amount", path)),
            floor_amount=float(_require(data, "floor_amount", path)),
            ceiling_amount=float(_require(data, "ceiling_amount", path)),
            market_sensitivity=float(_require(data, "market_sensitivity", path)),
            **_labels(data),
        )
    if kind == "guardrails":
        return GuardrailsWithdrawal(
            base_amount=float(_require(data, "base_amount", path)),
            base_percentage_pct=float(_require(data, "base_percentage_pct", path)),
            floor_percentage_pct=float(_require(data, "floor_percentage_pct", path)),
            ceiling_percentage_pct=float(_require(data, "ceiling_percentage_pct", path)),
            **_labels(data),
        )
    raise InvalidPolicyConfiguration(f"{path}.type: unknown withdrawal policy type '{kind}'")


@dataclass(slots=True)
class SimulationSettings:
    mode: str = "historical"
    start_year: int | None = None
    duration: int = 30
    max_workers: int | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any], path: str = "simulation_settings") -> "SimulationSettings":
        return cls(
            mode=_optional(data, "mode", "historical"),
            start_year=_optional_int(data, "start_year"),
            duration=int(_optional(data, "duration", 30)),
            max_workers=_optional_int(data, "max_workers"),
        )


@dataclass(slots=True)
class HistoricalSettings:
    series_path: str | None = None
    start_year: int | None = None
    end_year: int | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any], path: str = "historical") -> "HistoricalSettings":
        return cls(
            series_path=_optional(data, "series_path"),
            start_year=_optional_int(data, "start_year"),
            end_year=_optional_int(data, "end_year"),
        )


@dataclass(slots=True)
class SimulationRequest:
    portfolio: PortfolioConfig
    withdrawal_policy: WithdrawalPolicy
    simulation_settings: SimulationSettings
    historical: HistoricalSettings

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SimulationRequest":
        return cls(
            portfolio=PortfolioConfig.from_dict(_expect_dict(_require(data, "portfolio", "request"), "portfolio")),
            withdrawal_policy=policy_from_dict(
                _expect_dict(_require(data, "withdrawal_policy", "request"), "withdrawal_policy")
            ),
            simulation_settings=SimulationSettings.from_dict(
                _expect_dict(_optional(data, "simulation_settings", {}), "simulation_settings")
            ),
            historical=HistoricalSettings.from_dict(_expect_dict(_optional(data, "historical", {}), "historical")),
        )


def load_request(path: str | Path) -> SimulationRequest:
    """Load request JSON into strongly-typed dataclasses."""
    source = Path(path)
    raw = json.loads(source.read_text(encoding="utf-8"))
    if not isinstance(raw, dict):
        raise SchemaError("request: root must be a JSON object")
    return SimulationRequest.from_dict(raw)
