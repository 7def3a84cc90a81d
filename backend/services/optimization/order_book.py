"""
Synthetic order book ladder and its step-function pricing.

Prediction-market subgraphs only expose trade counts and collateral
volumes, not resting depth. ``OrderBookSynthesizer`` turns those aggregates
into a small ask ladder that behaves like real depth: prices climb on a
convex schedule (deeper levels get disproportionately expensive) while size
per level decays geometrically.

``OrderBookPricing`` walks that ladder the same way a market buy walks the
ask side: full levels first, then a partial fill of the first level the
budget cannot cover.
"""

import math
from bisect import bisect_right
from dataclasses import dataclass

from .market_stats import RATIO_EPSILON, MarketStatistics, Outcome
from .pricing import PricingModel

# Prices are quoted in 1/10000 increments on the synthetic ladder.
PRICE_DECIMALS = 4
PRICE_TICK = 10 ** -PRICE_DECIMALS
# Base price never gets closer than this to the ceiling.
MIN_PRICE_SPAN = 0.05
MIN_BASE_PRICE = 0.01


@dataclass
class OrderBookLevel:
    """Single level in order book."""
    price: float
    size: float  # In shares


@dataclass
class OrderBook:
    """Ask ladder for one outcome, sorted ascending by price."""
    platform_name: str
    levels: list[OrderBookLevel]

    def __post_init__(self):
        if not self.levels:
            raise ValueError("Order book needs at least one level")
        previous = 0.0
        for level in self.levels:
            if not 0 < level.price <= 1:
                raise ValueError(f"Level price {level.price} outside (0, 1]")
            if level.size <= 0:
                raise ValueError(f"Level size must be positive, got {level.size}")
            if level.price <= previous:
                raise ValueError("Level prices must be strictly increasing")
            previous = level.price

    @property
    def level_count(self) -> int:
        return len(self.levels)

    @property
    def total_liquidity(self) -> float:
        """Total shares resting on the ladder."""
        return sum(level.size for level in self.levels)

    @property
    def price_range(self) -> tuple[float, float]:
        return self.levels[0].price, self.levels[-1].price

    def summary(self, digits: int = 6) -> dict:
        low, high = self.price_range
        return {
            "platform_name": self.platform_name,
            "order_levels": self.level_count,
            "price_range": {"min": low, "max": high},
            "total_liquidity": round(self.total_liquidity, digits),
        }


class OrderBookPricing(PricingModel):
    """Step-function pricing over an ``OrderBook`` ask ladder."""

    venue = "order_book"

    def __init__(self, book: OrderBook):
        self.book = book
        self._prices = [level.price for level in book.levels]
        # _boundaries[k] = spend needed to clear levels 0..k-1
        self._boundaries = [0.0]
        for level in book.levels:
            self._boundaries.append(self._boundaries[-1] + level.price * level.size)

    @property
    def platform_name(self) -> str:
        return self.book.platform_name

    @property
    def capacity(self) -> float:
        return self._boundaries[-1]

    @property
    def min_price(self) -> float:
        return self._prices[0]

    def shares_for_budget(self, amount: float) -> float:
        remaining = max(0.0, float(amount))
        total_shares = 0.0

        for level in self.book.levels:
            if remaining <= 0:
                break

            level_value = level.price * level.size

            if level_value <= remaining:
                # Consume entire level
                total_shares += level.size
                remaining -= level_value
            else:
                # Partial fill on this level
                total_shares += remaining / level.price
                remaining = 0

        return total_shares

    def marginal_price(self, cumulative_spend: float) -> float:
        # Past the last level the ladder is exhausted; clamp to the top price
        # and let callers check Quote.depth_exhausted.
        if cumulative_spend >= self.capacity:
            return self._prices[-1]
        index = bisect_right(self._boundaries, max(0.0, cumulative_spend)) - 1
        return self._prices[min(index, len(self._prices) - 1)]

    def spend_at_price(self, price: float) -> float:
        affordable_levels = bisect_right(self._prices, price)
        return self._boundaries[affordable_levels]


class OrderBookSynthesizer:
    """
    Derive a synthetic ask ladder from aggregate trade statistics.

    The ladder is a pure function of its inputs: identical statistics always
    produce the identical book.

    Args:
        levels: Number of price levels to generate
        price_floor: Base price of the first level for a balanced market
        price_ceiling: Price of the deepest level
        convexity: Exponent of the price schedule (>1 accelerates deeper levels)
        max_skew_shift: Largest move of the base price caused by buy/sell skew
        decay_min: Geometric size ratio for books dominated by large trades
        decay_max: Geometric size ratio for books made of many small trades
        depth_multiplier: Shares of depth per unit of buy-side volume
        min_level_size: Size of the placeholder level for zero-volume markets
    """

    def __init__(
        self,
        levels: int = 10,
        price_floor: float = 0.40,
        price_ceiling: float = 0.95,
        convexity: float = 2.0,
        max_skew_shift: float = 0.10,
        decay_min: float = 0.6,
        decay_max: float = 0.9,
        depth_multiplier: float = 1.0,
        min_level_size: float = 1e-6,
    ):
        if levels < 1:
            raise ValueError("levels must be >= 1")
        if not 0 < price_floor < price_ceiling <= 1:
            raise ValueError("Expected 0 < price_floor < price_ceiling <= 1")
        if not 0 < decay_min <= decay_max <= 1:
            raise ValueError("Expected 0 < decay_min <= decay_max <= 1")
        self.levels = levels
        self.price_floor = price_floor
        self.price_ceiling = price_ceiling
        self.convexity = convexity
        self.max_skew_shift = max_skew_shift
        self.decay_min = decay_min
        self.decay_max = decay_max
        self.depth_multiplier = depth_multiplier
        self.min_level_size = min_level_size

    def synthesize(
        self,
        stats: MarketStatistics,
        platform_name: str = "OrderBook",
        outcome: Outcome = Outcome.YES,
    ) -> OrderBook:
        if outcome == Outcome.NO:
            # Selling pressure on YES is buying pressure on NO.
            stats = stats.mirrored()

        buy_volume = stats.collateral_buy_volume
        liquidity = buy_volume if buy_volume > 0 else stats.effective_volume * 0.5
        liquidity *= self.depth_multiplier

        if stats.is_empty or liquidity <= 0:
            return self._minimal_book(platform_name)

        prices = self._price_schedule(self._base_price(stats.buy_sell_volume_ratio))
        sizes = self._size_schedule(liquidity, stats.average_trade_size)

        return OrderBook(
            platform_name=platform_name,
            levels=[
                OrderBookLevel(price=price, size=size)
                for price, size in zip(prices, sizes)
            ],
        )

    def _base_price(self, skew: float) -> float:
        shift = self.max_skew_shift * math.tanh(math.log(max(skew, RATIO_EPSILON)))
        base = self.price_floor + shift
        return min(max(base, MIN_BASE_PRICE), self.price_ceiling - MIN_PRICE_SPAN)

    def _price_schedule(self, base: float) -> list[float]:
        if self.levels == 1:
            return [round(base, PRICE_DECIMALS)]

        span = self.price_ceiling - base
        prices: list[float] = []
        for i in range(self.levels):
            step = (i / (self.levels - 1)) ** self.convexity
            price = round(base + span * step, PRICE_DECIMALS)
            if prices and price <= prices[-1]:
                price = round(prices[-1] + PRICE_TICK, PRICE_DECIMALS)
            prices.append(min(price, 1.0))
        return prices

    def _size_schedule(self, liquidity: float, average_trade_size: float) -> list[float]:
        # Few large trades relative to depth -> liquidity concentrated near the top.
        granularity = min(1.0, average_trade_size * self.levels / liquidity)
        ratio = self.decay_max - (self.decay_max - self.decay_min) * granularity

        weights = [ratio ** i for i in range(self.levels)]
        total_weight = sum(weights)
        return [
            max(round(liquidity * w / total_weight, 6), self.min_level_size)
            for w in weights
        ]

    def _minimal_book(self, platform_name: str) -> OrderBook:
        return OrderBook(
            platform_name=platform_name,
            levels=[OrderBookLevel(price=self.price_ceiling, size=self.min_level_size)],
        )
