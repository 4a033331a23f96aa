import copy
import json
from pathlib import Path

from cyclesim.historical_data import HistoricalSeries, HistoricalYearRecord


def write_request(tmp_path: Path, data: dict, filename: str = "request.json") -> Path:
    path = tmp_path / filename
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


def clone_request(data: dict) -> dict:
    return copy.deepcopy(data)


def flat_series(start_year: int, years: int, equity: float, bond: float, inflation: float) -> HistoricalSeries:
    return HistoricalSeries(
        HistoricalYearRecord(
            year=year,
            equity_nominal_return_pct=equity,
            bond_nominal_return_pct=bond,
            inflation_rate_pct=inflation,
        )
        for year in range(start_year, start_year + years)
    )
