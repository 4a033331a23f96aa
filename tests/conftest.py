import json
from pathlib import Path

import pytest

from cyclesim.historical_data import HistoricalSeries, HistoricalYearRecord
from cyclesim.schema import PortfolioConfig
from cyclesim.withdrawals import FixedWithdrawal

ROOT = Path(__file__).resolve().parent.parent

# (year, equity %, bond %, inflation %)
MOCK_YEARS = [
    (1990, 10, 5, 2),
    (1991, 12, 6, 2),
    (1992, 15, 4, 3),
    (1993, 8, 5, 2),
    (1994, 9, 7, 2),
    (1995, -5, 6, 3),
    (1996, 4, 5, 2),
    (1997, 7, 4, 2),
    (1998, -10, 5, 4),
    (1999, 15, 3, 3),
]


@pytest.fixture
def sample_request_dict() -> dict:
    return json.loads((ROOT / "sample_request.json").read_text(encoding="utf-8"))


@pytest.fixture
def mock_series() -> HistoricalSeries:
    return HistoricalSeries(
        HistoricalYearRecord(
            year=year,
            equity_nominal_return_pct=equity,
            bond_nominal_return_pct=bond,
            inflation_rate_pct=inflation,
        )
        for year, equity, bond, inflation in MOCK_YEARS
    )


@pytest.fixture
def portfolio() -> PortfolioConfig:
    return PortfolioConfig(initial_balance=1_000_000, stock_allocation_pct=60, bond_allocation_pct=40)


@pytest.fixture
def fixed_policy() -> FixedWithdrawal:
    return FixedWithdrawal(amount=40000, adjust_for_inflation=True)
