"""
LMSR (Logarithmic Market Scoring Rule) market maker state and pricing.

For a binary market with outstanding shares q = (q_yes, q_no) and liquidity
parameter b, the market maker's cost function is:

    C(q) = b × ln(e^(q_yes/b) + e^(q_no/b))

and the instantaneous price of an outcome is its softmax weight:

    p_yes = e^(q_yes/b) / (e^(q_yes/b) + e^(q_no/b))

Buying Δ shares of one outcome costs C(q + Δ) − C(q). For a single-outcome
purchase this is analytically invertible. With p0 the outcome's current price
and x = a / b for a spend a:

    Δ(a)            = a + b × ln(1 − (1 − p0) × e^(−x)) − b × ln(p0)
    price after a   = 1 − (1 − p0) × e^(−x)
    spend to reach p = b × ln((1 − p0) / (1 − p))

The forms above stay finite for arbitrarily large spends, unlike the
textbook b × ln((e^x − 1 + p0) / p0).
"""

import math
from dataclasses import dataclass

import numpy as np

from .market_stats import MarketStatistics, Outcome
from .pricing import PricingModel


@dataclass
class LMSRMarket:
    """Binary LMSR market maker state."""
    platform_name: str
    yes_shares: float
    no_shares: float
    b: float  # Liquidity parameter; larger b = flatter price impact

    def __post_init__(self):
        if self.b <= 0:
            raise ValueError(f"Liquidity parameter must be positive, got {self.b}")
        if self.yes_shares < 0 or self.no_shares < 0:
            raise ValueError("Outstanding shares must be non-negative")

    def cost(self, yes_shares: float, no_shares: float) -> float:
        """LMSR cost function C(q), evaluated with a stable log-sum-exp."""
        return float(self.b * np.logaddexp(yes_shares / self.b, no_shares / self.b))

    def price(self, outcome: Outcome = Outcome.YES) -> float:
        """Instantaneous price of ``outcome`` in the current state."""
        target, other = self._ordered(outcome)
        # Logistic form of the softmax; avoids overflowing exp() on large q.
        return float(1.0 / (1.0 + np.exp((other - target) / self.b)))

    def trade_cost(self, shares: float, outcome: Outcome = Outcome.YES) -> float:
        """Collateral needed to buy ``shares`` of ``outcome`` from the current state."""
        if outcome == Outcome.YES:
            after = self.cost(self.yes_shares + shares, self.no_shares)
        else:
            after = self.cost(self.yes_shares, self.no_shares + shares)
        return after - self.cost(self.yes_shares, self.no_shares)

    def summary(self, digits: int = 6) -> dict:
        return {
            "platform_name": self.platform_name,
            "yes_shares": round(self.yes_shares, digits),
            "no_shares": round(self.no_shares, digits),
            "liquidity_parameter": round(self.b, digits),
        }

    def _ordered(self, outcome: Outcome) -> tuple[float, float]:
        if outcome == Outcome.YES:
            return self.yes_shares, self.no_shares
        return self.no_shares, self.yes_shares


class LMSRPricing(PricingModel):
    """Closed-form buy-side pricing of one outcome against an LMSR market."""

    venue = "lmsr"

    def __init__(
        self,
        market: LMSRMarket,
        outcome: Outcome = Outcome.YES,
        epsilon: float = 1e-10,
    ):
        """
        Args:
            market: LMSR state to buy from
            outcome: Outcome being purchased
            epsilon: Small constant to keep the starting price inside (0, 1)
        """
        self.market = market
        self.outcome = outcome
        self.epsilon = epsilon
        self.start_price = float(np.clip(market.price(outcome), epsilon, 1 - epsilon))

    @property
    def platform_name(self) -> str:
        return self.market.platform_name

    @property
    def b(self) -> float:
        return self.market.b

    @property
    def capacity(self) -> float:
        return math.inf

    @property
    def min_price(self) -> float:
        return self.start_price

    def shares_for_budget(self, amount: float) -> float:
        if amount <= 0:
            return 0.0
        x = amount / self.b
        p0 = self.start_price
        shares = amount + self.b * (math.log1p(-(1 - p0) * math.exp(-x)) - math.log(p0))
        return max(0.0, shares)

    def marginal_price(self, cumulative_spend: float) -> float:
        x = max(0.0, cumulative_spend) / self.b
        return 1.0 - (1.0 - self.start_price) * math.exp(-x)

    def spend_at_price(self, price: float) -> float:
        if price <= self.start_price:
            return 0.0
        if price >= 1.0:
            return math.inf
        return self.b * (math.log(1.0 - self.start_price) - math.log1p(-price))


class LMSRSynthesizer:
    """
    Derive an LMSR market maker state from aggregate trade statistics.

    b grows with historical collateral volume (deeper assumed liquidity,
    flatter price impact) but never drops below ``min_liquidity``. Outstanding
    shares are placed so the implied YES price equals the observed share of
    buy-side volume.
    """

    def __init__(
        self,
        min_liquidity: float = 100.0,
        volume_scale: float = 0.1,
        probability_clamp: float = 0.01,
    ):
        if min_liquidity <= 0:
            raise ValueError("min_liquidity must be positive")
        if not 0 < probability_clamp < 0.5:
            raise ValueError("probability_clamp must be in (0, 0.5)")
        self.min_liquidity = min_liquidity
        self.volume_scale = volume_scale
        self.probability_clamp = probability_clamp

    def synthesize(self, stats: MarketStatistics, platform_name: str = "LMSR") -> LMSRMarket:
        if stats.is_empty:
            return LMSRMarket(
                platform_name=platform_name,
                yes_shares=0.0,
                no_shares=0.0,
                b=self.min_liquidity,
            )

        b = max(self.min_liquidity, stats.effective_volume * self.volume_scale)
        probability = float(
            np.clip(
                stats.buy_volume_share,
                self.probability_clamp,
                1 - self.probability_clamp,
            )
        )
        # price_yes = sigmoid((q_yes - q_no) / b)
        share_gap = b * math.log(probability / (1 - probability))

        return LMSRMarket(
            platform_name=platform_name,
            yes_shares=round(max(share_gap, 0.0), 6),
            no_shares=round(max(-share_gap, 0.0), 6),
            b=round(b, 6),
        )
