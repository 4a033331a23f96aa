"""Single-cycle and historical-sweep orchestration."""

from __future__ import annotations

from concurrent.futures import ProcessPoolExecutor
from dataclasses import dataclass
from functools import partial
import logging
from typing import Sequence

from .engine import CycleResult, InsufficientHistoricalData, run_cycle
from .historical_data import HistoricalSeries, HistoricalYearRecord, bundled_series, load_series
from .schema import PortfolioConfig, SimulationRequest
from .withdrawals import WithdrawalPolicy

logger = logging.getLogger(__name__)

SIM_MODES = {"single", "historical"}


class NoValidCycles(ValueError):
    """Raised when a sweep finds no complete window of the requested duration."""


@dataclass(frozen=True, slots=True)
class SweepResult:
    mode: str
    duration: int
    cycles: tuple[CycleResult, ...]
    success_rate_pct: float
    median_ending_balance: float
    worst_case_balance: float
    best_case_balance: float


def summarize_cycles(cycles: Sequence[CycleResult], mode: str, duration: int) -> SweepResult:
    if not cycles:
        raise NoValidCycles(f"no complete {duration}-year cycles to summarize")

    ordered = tuple(sorted(cycles, key=lambda cycle: cycle.start_year))
    balances = sorted(cycle.final_balance for cycle in ordered)
    success_count = sum(1 for cycle in ordered if cycle.success)
    return SweepResult(
        mode=mode,
        duration=duration,
        cycles=ordered,
        success_rate_pct=100 * success_count / len(ordered),
        # Lower median for even counts.
        median_ending_balance=balances[len(balances) // 2],
        worst_case_balance=balances[0],
        best_case_balance=balances[-1],
    )


def run_single_cycle(
    series: HistoricalSeries,
    portfolio: PortfolioConfig,
    policy: WithdrawalPolicy,
    start_year: int,
    duration: int,
) -> CycleResult:
    records = series.fetch_series(gte=start_year, lt=start_year + duration)
    if len(records) < duration:
        raise InsufficientHistoricalData(
            f"Insufficient historical data: {duration} years requested from {start_year}, {len(records)} available"
        )
    return run_cycle(portfolio, policy, records)


def _windows(records: Sequence[HistoricalYearRecord], duration: int) -> list[tuple[HistoricalYearRecord, ...]]:
    if not records:
        return []
    first_year = records[0].year
    last_year = records[-1].year
    windows: list[tuple[HistoricalYearRecord, ...]] = []
    for start_year in range(first_year, last_year - duration + 1):
        window = tuple(r for r in records if start_year <= r.year < start_year + duration)
        if len(window) != duration:
            logger.debug("Skipping %s-year window starting %s: %s records", duration, start_year, len(window))
            continue
        windows.append(window)
    return windows


def run_historical_sweep(
    series: HistoricalSeries,
    portfolio: PortfolioConfig,
    policy: WithdrawalPolicy,
    duration: int,
    max_workers: int | None = None,
) -> SweepResult:
    """Run every complete historical window of ``duration`` years and aggregate the outcomes."""
    records = series.fetch_series()
    windows = _windows(records, duration)
    if not windows:
        raise NoValidCycles(f"No valid {duration}-year cycles in {len(records)} years of historical data")

    logger.info("Running %s historical cycles of %s years", len(windows), duration)
    run = partial(run_cycle, portfolio, policy)
    if max_workers is not None and max_workers > 1:
        with ProcessPoolExecutor(max_workers=max_workers) as executor:
            cycles = list(executor.map(run, windows))
    else:
        cycles = [run(window) for window in windows]

    for cycle in cycles:
        if not cycle.success:
            logger.debug("Cycle starting %s depleted after %s years", cycle.start_year, len(cycle.yearly_results))

    result = summarize_cycles(cycles, mode="historical", duration=duration)
    logger.info("Sweep finished: %.1f%% success over %s cycles", result.success_rate_pct, len(result.cycles))
    return result


def resolve_series(request: SimulationRequest) -> HistoricalSeries:
    hist = request.historical
    series = load_series(hist.series_path) if hist.series_path else bundled_series()
    if hist.start_year is not None or hist.end_year is not None:
        series = series.between(hist.start_year, hist.end_year)
    return series


def run_simulation(request: SimulationRequest, series: HistoricalSeries | None = None) -> SweepResult:
    settings = request.simulation_settings
    if series is None:
        series = resolve_series(request)

    if settings.mode == "single":
        if settings.start_year is None:
            raise ValueError("single mode requires simulation_settings.start_year")
        cycle = run_single_cycle(
            series,
            request.portfolio,
            request.withdrawal_policy,
            settings.start_year,
            settings.duration,
        )
        return summarize_cycles([cycle], mode="single", duration=settings.duration)

    if settings.mode == "historical":
        return run_historical_sweep(
            series,
            request.portfolio,
            request.withdrawal_policy,
            settings.duration,
            max_workers=settings.max_workers,
        )

    raise ValueError(f"unsupported simulation mode: {settings.mode}")
