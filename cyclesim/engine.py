"""Core year-by-year simulation of one historical cycle."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from .historical_data import HistoricalYearRecord
from .returns import apply_return, blended_return_pct
from .schema import PortfolioConfig
from .withdrawals import WithdrawalContext, WithdrawalPolicy, calculate_withdrawal


class InsufficientHistoricalData(ValueError):
    """Raised when fewer records are available than the requested duration."""


@dataclass(frozen=True, slots=True)
class YearlyResult:
    year: int
    starting_balance: float
    withdrawal: float
    stock_return_pct: float
    bond_return_pct: float
    ending_balance: float
    inflation_rate_pct: float


@dataclass(frozen=True, slots=True)
class CycleResult:
    start_year: int
    success: bool
    final_balance: float
    yearly_results: tuple[YearlyResult, ...]
    lowest_balance: float
    highest_balance: float
    average_return: float


def run_cycle(
    portfolio: PortfolioConfig,
    policy: WithdrawalPolicy,
    records: Sequence[HistoricalYearRecord],
) -> CycleResult:
    """Simulate one cycle over ``records``, stopping in the first year the balance is depleted.

    The caller is responsible for supplying exactly the window it wants simulated.
    """
    if not records:
        raise InsufficientHistoricalData("no historical records supplied for cycle")

    yearly: list[YearlyResult] = []
    balance = portfolio.initial_balance
    previous_withdrawal = 0.0
    inflation_adjustment = 1.0
    lowest = balance
    highest = balance
    total_return = 0.0

    for record in records:
        return_pct = blended_return_pct(record.equity_nominal_return_pct, record.bond_nominal_return_pct, portfolio)
        withdrawal = calculate_withdrawal(
            policy,
            WithdrawalContext(
                current_balance=balance,
                initial_balance=portfolio.initial_balance,
                previous_withdrawal=previous_withdrawal,
                inflation_adjustment=inflation_adjustment,
                portfolio_return=return_pct / 100,
            ),
        )
        after_withdrawal = balance - withdrawal
        ending = apply_return(after_withdrawal, return_pct)

        # Applies from next year on.
        inflation_adjustment *= 1 + record.inflation_rate_pct / 100

        lowest = min(lowest, ending)
        highest = max(highest, ending)
        if after_withdrawal == 0:
            total_return += return_pct / 100
        else:
            total_return += (ending - after_withdrawal) / after_withdrawal

        yearly.append(
            YearlyResult(
                year=record.year,
                starting_balance=balance,
                withdrawal=withdrawal,
                stock_return_pct=record.equity_nominal_return_pct,
                bond_return_pct=record.bond_nominal_return_pct,
                ending_balance=ending,
                inflation_rate_pct=record.inflation_rate_pct,
            )
        )

        if ending <= 0:
            return CycleResult(
                start_year=records[0].year,
                success=False,
                final_balance=0.0,
                yearly_results=tuple(yearly),
                lowest_balance=lowest,
                highest_balance=highest,
                average_return=total_return / len(yearly),
            )

        balance = ending
        previous_withdrawal = withdrawal

    return CycleResult(
        start_year=records[0].year,
        success=True,
        final_balance=balance,
        yearly_results=tuple(yearly),
        lowest_balance=lowest,
        highest_balance=highest,
        average_return=total_return / len(yearly),
    )
