"""CLI entry point for cyclesim."""

from __future__ import annotations

import argparse
from dataclasses import asdict
import json
import logging
from pathlib import Path
import sys

from .analysis import metrics_for_periods
from .engine import InsufficientHistoricalData
from .schema import SchemaError, SimulationRequest, load_request
from .simulation import SIM_MODES, NoValidCycles, SweepResult, resolve_series, run_simulation
from .validate import validate_request
from .withdrawals import PREDEFINED_POLICIES, policy_type_name


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Historical cycle retirement simulator")
    parser.add_argument("request", help="Path to simulation request JSON file")
    parser.add_argument("-o", "--output", help="Write the result as JSON to this path")
    parser.add_argument("--mode", choices=sorted(SIM_MODES), help="Override simulation mode")
    parser.add_argument("--start-year", type=int, help="Override start year (single mode)")
    parser.add_argument("--duration", type=int, help="Override cycle length in years")
    parser.add_argument("--workers", type=int, help="Run historical cycles in this many worker processes")
    parser.add_argument("--series", help="Path to a historical series JSON file")
    parser.add_argument("--preset", choices=sorted(PREDEFINED_POLICIES), help="Use a predefined withdrawal policy")
    parser.add_argument("--validate", action="store_true", help="Validate JSON only")
    parser.add_argument("--summary", action="store_true", help="Print text summary to stdout")
    parser.add_argument("--periods", action="store_true", help="Print average conditions for notable historical periods")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable progress logging")
    return parser


def _print_validation(errors: list[str], warnings: list[str]) -> None:
    for warning in warnings:
        print(f"WARNING: {warning}")
    for error in errors:
        print(f"ERROR: {error}", file=sys.stderr)


def _apply_overrides(request: SimulationRequest, args: argparse.Namespace) -> None:
    settings = request.simulation_settings
    if args.mode:
        settings.mode = args.mode
    if args.start_year is not None:
        settings.start_year = args.start_year
    if args.duration is not None:
        settings.duration = args.duration
    if args.workers is not None:
        settings.max_workers = args.workers
    if args.series:
        request.historical.series_path = args.series
    if args.preset:
        request.withdrawal_policy = PREDEFINED_POLICIES[args.preset]


def _print_summary(request: SimulationRequest, result: SweepResult) -> None:
    first = result.cycles[0]
    last = result.cycles[-1]
    print(f"Mode: {result.mode}")
    print(f"Policy: {policy_type_name(request.withdrawal_policy)}")
    print(f"Cycles: {len(result.cycles)} x {result.duration} years ({first.start_year}-{last.start_year} starts)")
    print(f"Success rate: {result.success_rate_pct:.1f}%")
    print(f"Median ending balance: ${result.median_ending_balance:,.0f}")
    print(f"Worst case: ${result.worst_case_balance:,.0f}")
    print(f"Best case: ${result.best_case_balance:,.0f}")
    failed = [cycle.start_year for cycle in result.cycles if not cycle.success]
    if failed:
        print(f"Depleted cycles: {', '.join(str(year) for year in failed)}")


def _print_periods(request: SimulationRequest) -> None:
    for name, metrics in metrics_for_periods(resolve_series(request)).items():
        print(
            f"{name}: stocks {metrics.stock_return_pct:.2f}%, bonds {metrics.bond_return_pct:.2f}%, "
            f"inflation {metrics.inflation_pct:.2f}% ({metrics.years} years)"
        )


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        request = load_request(args.request)
    except (SchemaError, OSError, ValueError) as exc:
        print(f"Failed to load request: {exc}", file=sys.stderr)
        return 2
    _apply_overrides(request, args)

    validation = validate_request(request)
    _print_validation(validation.errors, validation.warnings)
    if not validation.is_valid:
        return 1

    if args.validate:
        print("Request is valid.")
        return 0

    try:
        if args.periods:
            _print_periods(request)
        result = run_simulation(request)
    except (InsufficientHistoricalData, NoValidCycles, ValueError, OSError) as exc:
        print(f"Simulation failed: {exc}", file=sys.stderr)
        return 2

    if args.summary:
        _print_summary(request, result)

    if args.output:
        output = Path(args.output)
        output.write_text(json.dumps(asdict(result), indent=2), encoding="utf-8")
        print(f"Wrote result to {output}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
