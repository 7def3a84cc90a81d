"""Shared fixtures for split router tests."""

import sys
from pathlib import Path

BACKEND_ROOT = Path(__file__).resolve().parents[1]
if str(BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(BACKEND_ROOT))

import pytest

from services.split_router import SplitRouter


# ---------------------------------------------------------------------------
# Raw subgraph statistics (mimicking the trade-stats payloads)
# ---------------------------------------------------------------------------


@pytest.fixture
def polymarket_stats():
    """Order book venue stats: buy-heavy market, strings as the subgraph returns them."""
    return {
        "id": "polymarket-btc-100k",
        "tradesQuantity": "100",
        "buysQuantity": "60",
        "sellsQuantity": "40",
        "scaledCollateralVolume": "10000",
        "scaledCollateralBuyVolume": "6000",
        "scaledCollateralSellVolume": "4000",
    }


@pytest.fixture
def omen_stats():
    """LMSR venue stats: sell-heavy market."""
    return {
        "id": "omen-btc-100k",
        "tradesQuantity": 50,
        "buysQuantity": 20,
        "sellsQuantity": 30,
        "scaledCollateralVolume": 5000,
        "scaledCollateralBuyVolume": 2000,
        "scaledCollateralSellVolume": 3000,
    }


@pytest.fixture
def empty_stats():
    """A market that exists but has never traded."""
    return {
        "id": "fresh-market",
        "tradesQuantity": "0",
        "buysQuantity": "0",
        "sellsQuantity": "0",
        "scaledCollateralVolume": "0",
        "scaledCollateralBuyVolume": "0",
        "scaledCollateralSellVolume": "0",
    }


@pytest.fixture
def router():
    """Split router with default synthesis and optimizer parameters."""
    return SplitRouter()
