"""Withdrawal policy variants and per-year withdrawal calculation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Union


class InvalidPolicyConfiguration(ValueError):
    """Raised when a withdrawal policy is not one of the known variants."""


@dataclass(frozen=True, slots=True)
class FixedWithdrawal:
    amount: float
    adjust_for_inflation: bool = False
    name: str | None = None
    description: str | None = None


@dataclass(frozen=True, slots=True)
class PercentageWithdrawal:
    rate_pct: float
    name: str | None = None
    description: str | None = None


@dataclass(frozen=True, slots=True)
class VariableWithdrawal:
    base_amount: float
    floor_amount: float
    ceiling_amount: float
    market_sensitivity: float
    name: str | None = None
    description: str | None = None


@dataclass(frozen=True, slots=True)
class GuardrailsWithdrawal:
    base_amount: float
    base_percentage_pct: float
    floor_percentage_pct: float
    ceiling_percentage_pct: float
    name: str | None = None
    description: str | None = None


WithdrawalPolicy = Union[FixedWithdrawal, PercentageWithdrawal, VariableWithdrawal, GuardrailsWithdrawal]


@dataclass(frozen=True, slots=True)
class WithdrawalContext:
    current_balance: float
    initial_balance: float
    previous_withdrawal: float
    inflation_adjustment: float
    # Decimal, not percent.
    portfolio_return: float


def _fixed(policy: FixedWithdrawal, ctx: WithdrawalContext) -> float:
    if policy.adjust_for_inflation:
        return policy.amount * ctx.inflation_adjustment
    return policy.amount


def _percentage(policy: PercentageWithdrawal, ctx: WithdrawalContext) -> float:
    return ctx.current_balance * policy.rate_pct / 100


def _variable(policy: VariableWithdrawal, ctx: WithdrawalContext) -> float:
    base = policy.base_amount * ctx.inflation_adjustment
    performance = (ctx.current_balance - ctx.initial_balance) / ctx.initial_balance
    adjusted = base * (1 + performance * policy.market_sensitivity)
    floor = policy.floor_amount * ctx.inflation_adjustment
    ceiling = policy.ceiling_amount * ctx.inflation_adjustment
    return min(max(adjusted, floor), ceiling)


def _guardrails(policy: GuardrailsWithdrawal, ctx: WithdrawalContext) -> float:
    balance = ctx.current_balance
    if ctx.previous_withdrawal == 0:
        return balance * policy.base_percentage_pct / 100

    # An empty portfolio has an unbounded withdrawal rate.
    if balance == 0:
        return 0.0
    current_rate = ctx.previous_withdrawal / balance * 100
    if current_rate > policy.ceiling_percentage_pct:
        return balance * policy.ceiling_percentage_pct / 100
    if current_rate < policy.floor_percentage_pct:
        return balance * policy.floor_percentage_pct / 100
    return ctx.previous_withdrawal * ctx.inflation_adjustment


_CALCULATORS: dict[type, Callable[..., float]] = {
    FixedWithdrawal: _fixed,
    PercentageWithdrawal: _percentage,
    VariableWithdrawal: _variable,
    GuardrailsWithdrawal: _guardrails,
}

POLICY_TYPES: dict[str, type] = {
    "fixed": FixedWithdrawal,
    "percentage": PercentageWithdrawal,
    "variable": VariableWithdrawal,
    "guardrails": GuardrailsWithdrawal,
}


def calculate_withdrawal(policy: WithdrawalPolicy, context: WithdrawalContext) -> float:
    """Return the withdrawal amount for the current simulated year."""
    calculator = _CALCULATORS.get(type(policy))
    if calculator is None:
        raise InvalidPolicyConfiguration(f"unknown withdrawal policy: {type(policy).__name__}")
    return calculator(policy, context)


def policy_type_name(policy: WithdrawalPolicy) -> str:
    for name, cls in POLICY_TYPES.items():
        if type(policy) is cls:
            return name
    raise InvalidPolicyConfiguration(f"unknown withdrawal policy: {type(policy).__name__}")


PREDEFINED_POLICIES: dict[str, WithdrawalPolicy] = {
    "constant_dollar": FixedWithdrawal(
        amount=40000,
        adjust_for_inflation=True,
        name="Constant Dollar",
        description="Withdraw a fixed amount each year, optionally adjusted for inflation",
    ),
    "percentage_of_portfolio": PercentageWithdrawal(
        rate_pct=4,
        name="Percentage of Portfolio",
        description="Withdraw a fixed percentage of the current portfolio value each year",
    ),
    "variable_spending": VariableWithdrawal(
        base_amount=40000,
        floor_amount=30000,
        ceiling_amount=50000,
        market_sensitivity=0.5,
        name="Variable Spending",
        description="Adjust withdrawals based on portfolio performance with floor and ceiling limits",
    ),
    "guardrails": GuardrailsWithdrawal(
        base_amount=40000,
        base_percentage_pct=4,
        floor_percentage_pct=3,
        ceiling_percentage_pct=6,
        name="Guardrails",
        description="Adjust spending when withdrawal rate exceeds certain thresholds",
    ),
}
