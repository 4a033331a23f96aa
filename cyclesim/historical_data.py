"""Historical annual market dataset and series access.

Values are annual percentages (stock return, bond return, inflation) keyed by
year. The bundled v1 dataset is deterministic and covers 1926-2024.
"""

from __future__ import annotations

from dataclasses import dataclass
import json
import math
from pathlib import Path
from typing import Any, Final, Iterable

from .schema import SchemaError, _expect_list, _require


@dataclass(frozen=True, slots=True)
class HistoricalYearRecord:
    year: int
    equity_nominal_return_pct: float
    bond_nominal_return_pct: float
    inflation_rate_pct: float

    @classmethod
    def from_dict(cls, data: dict[str, Any], path: str) -> "HistoricalYearRecord":
        if not isinstance(data, dict):
            raise SchemaError(f"{path}: expected object")
        return cls(
            year=int(_require(data, "year", path)),
            equity_nominal_return_pct=float(_require(data, "equity_nominal_return_pct", path)),
            bond_nominal_return_pct=float(_require(data, "bond_nominal_return_pct", path)),
            inflation_rate_pct=float(_require(data, "inflation_rate_pct", path)),
        )


class HistoricalSeries:
    """Read-only, year-ordered collection of annual records."""

    def __init__(self, records: Iterable[HistoricalYearRecord]) -> None:
        ordered = tuple(sorted(records, key=lambda record: record.year))
        for prev, record in zip(ordered, ordered[1:]):
            if prev.year == record.year:
                raise ValueError(f"duplicate historical record for year {record.year}")
        self._records = ordered

    def __len__(self) -> int:
        return len(self._records)

    @property
    def years(self) -> list[int]:
        return [record.year for record in self._records]

    def fetch_series(self, gte: int | None = None, lt: int | None = None) -> tuple[HistoricalYearRecord, ...]:
        """Return records with ``gte <= year < lt``, ascending by year."""
        return tuple(
            record
            for record in self._records
            if (gte is None or record.year >= gte) and (lt is None or record.year < lt)
        )

    def between(self, start_year: int | None, end_year: int | None) -> "HistoricalSeries":
        """Narrow to an inclusive year range."""
        upper = None if end_year is None else end_year + 1
        return HistoricalSeries(self.fetch_series(gte=start_year, lt=upper))


def _series_value(year: int, *, center: float, amplitude: float, period: int) -> float:
    phase = (year - 1926) % period
    x = (phase / period) * 6.283185307179586
    # Simple bounded waveform without external dependencies.
    return center + amplitude * (0.65 * math.sin(x) + 0.35 * math.sin(2.0 * x + 0.7))


def _build_dataset() -> tuple[HistoricalYearRecord, ...]:
    out: list[HistoricalYearRecord] = []
    for year in range(1926, 2025):
        stock = _series_value(year, center=10.0, amplitude=22.0, period=17)
        bond = _series_value(year, center=4.0, amplitude=10.0, period=11)
        inflation = _series_value(year, center=3.0, amplitude=4.0, period=13)
        out.append(
            HistoricalYearRecord(
                year=year,
                equity_nominal_return_pct=round(max(-45.0, stock), 4),
                bond_nominal_return_pct=round(max(-20.0, bond), 4),
                inflation_rate_pct=round(max(-10.0, inflation), 4),
            )
        )
    return tuple(out)


BUNDLED_RECORDS: Final[tuple[HistoricalYearRecord, ...]] = _build_dataset()


def bundled_series() -> HistoricalSeries:
    return HistoricalSeries(BUNDLED_RECORDS)


def load_series(path: str | Path) -> HistoricalSeries:
    """Load a JSON array of year records into a series."""
    raw = json.loads(Path(path).read_text(encoding="utf-8"))
    items = _expect_list(raw, "series")
    if not items:
        raise SchemaError("series: at least one record is required")
    records = [HistoricalYearRecord.from_dict(item, f"series[{idx}]") for idx, item in enumerate(items)]
    try:
        return HistoricalSeries(records)
    except ValueError as exc:
        raise SchemaError(f"series: {exc}") from exc
