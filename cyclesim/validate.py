"""Semantic validation for simulation requests."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable

from .schema import DynamicAllocation, PortfolioConfig, RebalancingSettings, SimulationRequest
from .simulation import SIM_MODES
from .withdrawals import (
    FixedWithdrawal,
    GuardrailsWithdrawal,
    PercentageWithdrawal,
    VariableWithdrawal,
    WithdrawalPolicy,
)

MIN_INITIAL_BALANCE = 1000
REBALANCING_STRATEGIES = {"none", "periodic", "threshold"}
DYNAMIC_ALLOCATION_TYPES = {"dividend", "valuation", "both"}


@dataclass(slots=True)
class ValidationResult:
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors


def _check_enum(result: ValidationResult, path: str, value: str, allowed: Iterable[str]) -> None:
    allowed_set = set(allowed)
    if value not in allowed_set:
        expected = ", ".join(sorted(allowed_set))
        result.errors.append(f"{path}: '{value}' is not valid; expected one of [{expected}]")


def _check_range(result: ValidationResult, path: str, value: float, low: float, high: float) -> None:
    if value < low:
        result.errors.append(f"{path}: must be >= {low:g}")
    elif value > high:
        result.errors.append(f"{path}: must be <= {high:g}")


def _check_positive(result: ValidationResult, path: str, value: float) -> None:
    if value <= 0:
        result.errors.append(f"{path}: must be > 0")


def _validate_rebalancing(result: ValidationResult, rebalancing: RebalancingSettings, base: str) -> None:
    _check_enum(result, f"{base}.strategy", rebalancing.strategy, REBALANCING_STRATEGIES)
    if rebalancing.strategy == "periodic":
        if rebalancing.frequency_months is None:
            result.errors.append(f"{base}.frequency_months: required for periodic rebalancing")
        else:
            _check_range(result, f"{base}.frequency_months", rebalancing.frequency_months, 1, 12)
    if rebalancing.strategy == "threshold":
        if rebalancing.threshold_pct is None:
            result.errors.append(f"{base}.threshold_pct: required for threshold rebalancing")
        else:
            _check_range(result, f"{base}.threshold_pct", rebalancing.threshold_pct, 1, 20)
    if rebalancing.strategy in {"periodic", "threshold"}:
        result.warnings.append(f"{base}: rebalancing is not applied; returns use a fixed annual blend")


def _validate_dynamic_allocation(result: ValidationResult, dynamic: DynamicAllocation, base: str) -> None:
    if not dynamic.enabled:
        return
    _check_enum(result, f"{base}.type", dynamic.type, DYNAMIC_ALLOCATION_TYPES)
    if dynamic.type in {"dividend", "both"}:
        _check_range(result, f"{base}.dividend_thresholds.low", dynamic.dividend_thresholds.low, 0, 10)
        _check_range(result, f"{base}.dividend_thresholds.high", dynamic.dividend_thresholds.high, 0, 10)
        if dynamic.dividend_thresholds.low >= dynamic.dividend_thresholds.high:
            result.errors.append(f"{base}.dividend_thresholds: low must be < high")
    if dynamic.type in {"valuation", "both"}:
        _check_range(result, f"{base}.valuation_thresholds.low", dynamic.valuation_thresholds.low, 0, 50)
        _check_range(result, f"{base}.valuation_thresholds.high", dynamic.valuation_thresholds.high, 0, 50)
        if dynamic.valuation_thresholds.low >= dynamic.valuation_thresholds.high:
            result.errors.append(f"{base}.valuation_thresholds: low must be < high")
    result.warnings.append(f"{base}: dynamic allocation is not applied; allocation stays fixed")


def validate_portfolio(result: ValidationResult, portfolio: PortfolioConfig, base: str = "portfolio") -> None:
    _check_positive(result, f"{base}.initial_balance", portfolio.initial_balance)
    if 0 < portfolio.initial_balance < MIN_INITIAL_BALANCE:
        result.warnings.append(f"{base}.initial_balance: below {MIN_INITIAL_BALANCE:,}")
    _check_range(result, f"{base}.stock_allocation_pct", portfolio.stock_allocation_pct, 0, 100)
    _check_range(result, f"{base}.bond_allocation_pct", portfolio.bond_allocation_pct, 0, 100)
    if portfolio.stock_allocation_pct + portfolio.bond_allocation_pct != 100:
        result.errors.append(f"{base}: stock_allocation_pct and bond_allocation_pct must sum to 100")
    _validate_rebalancing(result, portfolio.rebalancing, f"{base}.rebalancing")
    _validate_dynamic_allocation(result, portfolio.dynamic_allocation, f"{base}.dynamic_allocation")


def validate_policy(result: ValidationResult, policy: WithdrawalPolicy, base: str = "withdrawal_policy") -> None:
    if isinstance(policy, FixedWithdrawal):
        _check_positive(result, f"{base}.amount", policy.amount)
    elif isinstance(policy, PercentageWithdrawal):
        _check_positive(result, f"{base}.rate_pct", policy.rate_pct)
        if policy.rate_pct > 100:
            result.errors.append(f"{base}.rate_pct: must be <= 100")
    elif isinstance(policy, VariableWithdrawal):
        _check_positive(result, f"{base}.base_amount", policy.base_amount)
        _check_positive(result, f"{base}.floor_amount", policy.floor_amount)
        _check_positive(result, f"{base}.ceiling_amount", policy.ceiling_amount)
        if not policy.floor_amount <= policy.base_amount <= policy.ceiling_amount:
            result.errors.append(f"{base}: floor_amount <= base_amount <= ceiling_amount is required")
        _check_range(result, f"{base}.market_sensitivity", policy.market_sensitivity, 0, 1)
    elif isinstance(policy, GuardrailsWithdrawal):
        _check_positive(result, f"{base}.base_amount", policy.base_amount)
        _check_positive(result, f"{base}.base_percentage_pct", policy.base_percentage_pct)
        if policy.base_percentage_pct > 100:
            result.errors.append(f"{base}.base_percentage_pct: must be <= 100")
        if not policy.floor_percentage_pct < policy.base_percentage_pct < policy.ceiling_percentage_pct:
            result.errors.append(
                f"{base}: floor_percentage_pct < base_percentage_pct < ceiling_percentage_pct is required"
            )
    else:
        result.errors.append(f"{base}: unknown withdrawal policy {type(policy).__name__}")


def validate_request(request: SimulationRequest) -> ValidationResult:
    result = ValidationResult()
    validate_portfolio(result, request.portfolio)
    validate_policy(result, request.withdrawal_policy)

    settings = request.simulation_settings
    _check_enum(result, "simulation_settings.mode", settings.mode, SIM_MODES)
    _check_positive(result, "simulation_settings.duration", settings.duration)
    if settings.mode == "single" and settings.start_year is None:
        result.errors.append("simulation_settings.start_year: required when mode is 'single'")
    if settings.mode == "historical" and settings.start_year is not None:
        result.warnings.append("simulation_settings.start_year: ignored when mode is 'historical'")
    if settings.max_workers is not None:
        _check_positive(result, "simulation_settings.max_workers", settings.max_workers)

    hist = request.historical
    if hist.start_year is not None and hist.end_year is not None and hist.start_year > hist.end_year:
        result.errors.append("historical.start_year/historical.end_year: start_year must be <= end_year")

    return result
