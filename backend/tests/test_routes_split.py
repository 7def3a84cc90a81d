import sys
from pathlib import Path

import pytest
from fastapi import HTTPException
from pydantic import ValidationError

BACKEND_ROOT = Path(__file__).resolve().parents[1]
if str(BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(BACKEND_ROOT))

from api import routes_split
from services.optimization import UnsolvableBisection


@pytest.mark.asyncio
async def test_optimize_route_returns_result_dict(polymarket_stats, omen_stats):
    out = await routes_split.optimize_split(
        routes_split.OptimizeRequest(
            budget=1000,
            order_book_stats=polymarket_stats,
            lmsr_stats=omen_stats,
        )
    )

    assert out["budget"] == 1000.0
    assert out["is_optimal"] is True
    assert out["order_book_allocation"] + out["lmsr_allocation"] == pytest.approx(1000, abs=1e-5)
    assert "training_record" not in out


@pytest.mark.asyncio
async def test_optimize_route_attaches_training_record(polymarket_stats, omen_stats):
    out = await routes_split.optimize_split(
        routes_split.OptimizeRequest(
            budget=1000,
            order_book_stats=polymarket_stats,
            lmsr_stats=omen_stats,
            include_training_record=True,
            market_category="crypto",
        )
    )

    record = out["training_record"]
    assert record["input_features"]["market_category"] == "crypto"
    assert record["output_targets"]["strategy"] == out["strategy"]


@pytest.mark.asyncio
async def test_optimize_route_without_data_is_422():
    with pytest.raises(HTTPException) as exc:
        await routes_split.optimize_split(routes_split.OptimizeRequest(budget=10))
    assert exc.value.status_code == 422


@pytest.mark.asyncio
async def test_unsolvable_search_is_500(monkeypatch, polymarket_stats, omen_stats):
    def _fail(*args, **kwargs):
        raise UnsolvableBisection("did not converge")

    monkeypatch.setattr(routes_split.split_router, "optimize", _fail)

    with pytest.raises(HTTPException) as exc:
        await routes_split.optimize_split(
            routes_split.OptimizeRequest(
                budget=10, order_book_stats=polymarket_stats, lmsr_stats=omen_stats
            )
        )
    assert exc.value.status_code == 500


def test_request_models_reject_bad_input():
    with pytest.raises(ValidationError):
        routes_split.OptimizeRequest(budget=0)
    with pytest.raises(ValidationError):
        routes_split.OptimizeRequest(budget=10, outcome="maybe")
    with pytest.raises(ValidationError):
        routes_split.QuoteRequest(venue="amm", stats={}, allocation=1)
    with pytest.raises(ValidationError):
        routes_split.PreviewRequest(budget=10, order_book_allocation=-1)


@pytest.mark.asyncio
async def test_quote_route(omen_stats):
    out = await routes_split.quote_venue(
        routes_split.QuoteRequest(venue="lmsr", stats=omen_stats, allocation=100)
    )
    assert out["venue"] == "lmsr"
    assert out["filled"] == 100.0
    assert out["shares"] > 100.0
    assert out["depth_exhausted"] is False


@pytest.mark.asyncio
async def test_preview_route(polymarket_stats, omen_stats):
    out = await routes_split.preview_split(
        routes_split.PreviewRequest(
            budget=1000,
            order_book_allocation=400,
            order_book_stats=polymarket_stats,
            lmsr_stats=omen_stats,
        )
    )
    assert out["is_optimal"] is False
    assert out["order_book_allocation"] == 400.0
    assert out["lmsr_allocation"] == 600.0
    assert out["strategy"] == "balanced"


@pytest.mark.asyncio
async def test_preview_route_without_data_is_422():
    with pytest.raises(HTTPException) as exc:
        await routes_split.preview_split(
            routes_split.PreviewRequest(budget=10, order_book_allocation=5)
        )
    assert exc.value.status_code == 422


@pytest.mark.asyncio
async def test_actions_routes(polymarket_stats):
    listed = await routes_split.list_actions()
    assert [action["name"] for action in listed] == ["optimizeBettingSplit"]

    out = await routes_split.run_action(
        "optimizeBettingSplit", {"budget": 100, "polymarketData": polymarket_stats}
    )
    assert out["success"] is True
    assert out["result"]["strategy"] == "order-book-only"

    failed = await routes_split.run_action("optimizeBettingSplit", {})
    assert failed["success"] is False

    with pytest.raises(HTTPException) as exc:
        await routes_split.run_action("placeBet", {})
    assert exc.value.status_code == 404


def test_http_error_mapping():
    from services.optimization import InvalidBudget, NoMarketData

    for error, status in [
        (InvalidBudget("bad"), 400),
        (NoMarketData("none"), 422),
        (UnsolvableBisection("stuck"), 500),
    ]:
        with pytest.raises(HTTPException) as exc:
            routes_split._raise_http(error)
        assert exc.value.status_code == status
        assert exc.value.detail == str(error)


def test_app_mounts_split_routes_under_api():
    from main import app, split_api_router
    from services import split_router

    assert split_api_router is routes_split.router
    assert split_router is not split_api_router

    paths = {route.path for route in app.routes}
    assert "/api/split/optimize" in paths
    assert "/api/split/actions/{action_name}" in paths
    assert "/health" in paths
