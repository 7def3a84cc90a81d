import sys
from pathlib import Path

import pytest

BACKEND_ROOT = Path(__file__).resolve().parents[1]
if str(BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(BACKEND_ROOT))

from services import split_actions
from services.split_actions import build_actions, execute_action


def test_optimize_action_returns_split(polymarket_stats, omen_stats):
    out = execute_action(
        "optimizeBettingSplit",
        {"budget": 1000, "polymarketData": polymarket_stats, "omenData": omen_stats},
    )

    assert out.success
    assert out.error is None
    assert out.result["budget"] == 1000.0
    assert out.result["order_book_allocation"] + out.result["lmsr_allocation"] == pytest.approx(
        1000, abs=1e-5
    )
    assert out.execution_time_ms >= 0


def test_optimize_action_accepts_string_budget_and_outcome(polymarket_stats):
    out = execute_action(
        "optimizeBettingSplit",
        {"budget": "250", "polymarketData": polymarket_stats, "outcome": "no"},
    )
    assert out.success
    assert out.result["outcome"] == "no"
    assert out.result["strategy"] == "order-book-only"


def test_unknown_action_is_reported():
    out = execute_action("placeBet", {"budget": 10})
    assert not out.success
    assert out.error == "Action 'placeBet' not found"


def test_missing_required_parameter_is_reported(omen_stats):
    out = execute_action("optimizeBettingSplit", {"omenData": omen_stats})
    assert not out.success
    assert out.error == "Required parameter 'budget' is missing"


def test_engine_errors_become_failed_results(polymarket_stats):
    no_data = execute_action("optimizeBettingSplit", {"budget": 100})
    assert not no_data.success
    assert "At least one market data source" in no_data.error

    bad_budget = execute_action(
        "optimizeBettingSplit", {"budget": "lots", "polymarketData": polymarket_stats}
    )
    assert not bad_budget.success
    assert "Budget" in bad_budget.error

    bad_outcome = execute_action(
        "optimizeBettingSplit",
        {"budget": 10, "polymarketData": polymarket_stats, "outcome": "maybe"},
    )
    assert not bad_outcome.success


def test_action_descriptions_list_parameters():
    description = split_actions.available_actions["optimizeBettingSplit"].describe()

    assert description["name"] == "optimizeBettingSplit"
    assert description["parameters"]["budget"]["required"] is True
    assert description["parameters"]["polymarketData"]["required"] is False
    assert set(description["parameters"]) == {"budget", "polymarketData", "omenData", "outcome"}


def test_custom_registry_uses_supplied_router(router, omen_stats):
    actions = build_actions(router)
    out = execute_action("optimizeBettingSplit", {"budget": 10, "omenData": omen_stats}, actions)
    assert out.success
    assert out.result["strategy"] == "lmsr-only"


def test_result_to_dict_shape():
    data = execute_action("nope").to_dict()
    assert set(data) == {"action_name", "success", "result", "error", "execution_time_ms"}
    assert data["action_name"] == "nope"
