import pytest

from cyclesim.schema import SimulationRequest
from cyclesim.validate import validate_request
from tests.helpers import clone_request


def _run_validation(sample_request_dict, mutator):
    data = clone_request(sample_request_dict)
    mutator(data)
    return validate_request(SimulationRequest.from_dict(data))


def test_sample_request_validates(sample_request_dict):
    result = validate_request(SimulationRequest.from_dict(sample_request_dict))
    assert result.errors == []
    assert result.warnings == []
    assert result.is_valid


@pytest.mark.parametrize(
    ("mutator", "expected_error"),
    [
        (
            lambda d: d["portfolio"].update({"stock_allocation_pct": 70}),
            "portfolio: stock_allocation_pct and bond_allocation_pct must sum to 100",
        ),
        (
            lambda d: d["portfolio"].update({"initial_balance": 0}),
            "portfolio.initial_balance: must be > 0",
        ),
        (
            lambda d: d["portfolio"].update({"stock_allocation_pct": 120, "bond_allocation_pct": -20}),
            "portfolio.stock_allocation_pct: must be <= 100",
        ),
        (
            lambda d: d["portfolio"].update({"rebalancing": {"strategy": "periodic"}}),
            "portfolio.rebalancing.frequency_months: required for periodic rebalancing",
        ),
        (
            lambda d: d["portfolio"].update({"rebalancing": {"strategy": "threshold", "threshold_pct": 40}}),
            "portfolio.rebalancing.threshold_pct: must be <= 20",
        ),
        (
            lambda d: d["portfolio"].update({"rebalancing": {"strategy": "weekly"}}),
            "portfolio.rebalancing.strategy: 'weekly' is not valid; expected one of [none, periodic, threshold]",
        ),
        (
            lambda d: d["portfolio"].update(
                {"dynamic_allocation": {"enabled": True, "type": "dividend", "dividend_thresholds": {"low": 4, "high": 2}}}
            ),
            "portfolio.dynamic_allocation.dividend_thresholds: low must be < high",
        ),
        (
            lambda d: d.update({"withdrawal_policy": {"type": "fixed", "amount": -5}}),
            "withdrawal_policy.amount: must be > 0",
        ),
        (
            lambda d: d.update({"withdrawal_policy": {"type": "percentage", "rate_pct": 150}}),
            "withdrawal_policy.rate_pct: must be <= 100",
        ),
        (
            lambda d: d.update(
                {
                    "withdrawal_policy": {
                        "type": "variable",
                        "base_amount": 60000,
                        "floor_amount": 30000,
                        "ceiling_amount": 50000,
                        "market_sensitivity": 0.5,
                    }
                }
            ),
            "withdrawal_policy: floor_amount <= base_amount <= ceiling_amount is required",
        ),
        (
            lambda d: d.update(
                {
                    "withdrawal_policy": {
                        "type": "variable",
                        "base_amount": 40000,
                        "floor_amount": 30000,
                        "ceiling_amount": 50000,
                        "market_sensitivity": 1.5,
                    }
                }
            ),
            "withdrawal_policy.market_sensitivity: must be <= 1",
        ),
        (
            lambda d: d.update(
                {
                    "withdrawal_policy": {
                        "type": "guardrails",
                        "base_amount": 40000,
                        "base_percentage_pct": 4,
                        "floor_percentage_pct": 5,
                        "ceiling_percentage_pct": 6,
                    }
                }
            ),
            "withdrawal_policy: floor_percentage_pct < base_percentage_pct < ceiling_percentage_pct is required",
        ),
        (
            lambda d: d["simulation_settings"].update({"mode": "monte_carlo"}),
            "simulation_settings.mode: 'monte_carlo' is not valid; expected one of [historical, single]",
        ),
        (
            lambda d: d["simulation_settings"].update({"mode": "single", "start_year": None}),
            "simulation_settings.start_year: required when mode is 'single'",
        ),
        (
            lambda d: d["simulation_settings"].update({"duration": 0}),
            "simulation_settings.duration: must be > 0",
        ),
        (
            lambda d: d["simulation_settings"].update({"max_workers": 0}),
            "simulation_settings.max_workers: must be > 0",
        ),
        (
            lambda d: d["historical"].update({"start_year": 2000, "end_year": 1990}),
            "historical.start_year/historical.end_year: start_year must be <= end_year",
        ),
    ],
)
def test_validation_errors(sample_request_dict, mutator, expected_error):
    result = _run_validation(sample_request_dict, mutator)
    assert expected_error in result.errors
    assert not result.is_valid


def test_small_balance_warns(sample_request_dict):
    result = _run_validation(sample_request_dict, lambda d: d["portfolio"].update({"initial_balance": 500}))
    assert result.is_valid
    assert "portfolio.initial_balance: below 1,000" in result.warnings


def test_rebalancing_is_accepted_with_warning(sample_request_dict):
    result = _run_validation(
        sample_request_dict,
        lambda d: d["portfolio"].update({"rebalancing": {"strategy": "periodic", "frequency_months": 12}}),
    )
    assert result.is_valid
    assert result.warnings == ["portfolio.rebalancing: rebalancing is not applied; returns use a fixed annual blend"]


def test_dynamic_allocation_is_accepted_with_warning(sample_request_dict):
    result = _run_validation(
        sample_request_dict,
        lambda d: d["portfolio"].update({"dynamic_allocation": {"enabled": True, "type": "valuation"}}),
    )
    assert result.is_valid
    assert result.warnings == ["portfolio.dynamic_allocation: dynamic allocation is not applied; allocation stays fixed"]


def test_start_year_ignored_in_historical_mode(sample_request_dict):
    result = _run_validation(sample_request_dict, lambda d: d["simulation_settings"].update({"start_year": 1990}))
    assert result.is_valid
    assert "simulation_settings.start_year: ignored when mode is 'historical'" in result.warnings
