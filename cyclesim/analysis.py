"""Average market conditions over named historical periods."""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Final, Iterable

from .engine import InsufficientHistoricalData
from .historical_data import HistoricalSeries

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Period:
    start_year: int
    end_year: int
    name: str


@dataclass(frozen=True, slots=True)
class PeriodMetrics:
    stock_return_pct: float
    bond_return_pct: float
    inflation_pct: float
    years: int


NOTABLE_PERIODS: Final[tuple[Period, ...]] = (
    Period(1929, 1932, "Great Depression"),
    Period(1970, 1980, "High Inflation Era"),
    Period(1990, 2000, "Tech Boom"),
    Period(2000, 2002, "Dot-com Crash"),
    Period(2008, 2009, "Financial Crisis"),
    Period(2020, 2021, "COVID-19 Crisis"),
)


def period_metrics(series: HistoricalSeries, start_year: int, end_year: int) -> PeriodMetrics:
    """Average annual returns and inflation over ``start_year..end_year`` inclusive."""
    records = series.fetch_series(gte=start_year, lt=end_year + 1)
    if not records:
        raise InsufficientHistoricalData(f"No data found for period {start_year}-{end_year}")
    count = len(records)
    return PeriodMetrics(
        stock_return_pct=sum(r.equity_nominal_return_pct for r in records) / count,
        bond_return_pct=sum(r.bond_nominal_return_pct for r in records) / count,
        inflation_pct=sum(r.inflation_rate_pct for r in records) / count,
        years=count,
    )


def metrics_for_periods(
    series: HistoricalSeries, periods: Iterable[Period] = NOTABLE_PERIODS
) -> dict[str, PeriodMetrics]:
    metrics: dict[str, PeriodMetrics] = {}
    for period in periods:
        try:
            metrics[period.name] = period_metrics(series, period.start_year, period.end_year)
        except InsufficientHistoricalData as exc:
            logger.warning("Skipping period %s: %s", period.name, exc)
    return metrics
