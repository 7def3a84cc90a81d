"""
Shared pricing contract for the two venue types.

Both the order book ladder and the LMSR market maker answer the same three
questions for a buyer of a single outcome:

- how many shares does a given spend buy,
- what does the next share cost after a given spend,
- how much can be spent before the next share costs more than a given price.

The third is the inverse of the second and is what the split optimizer
bisects over.
"""

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass
class Quote:
    """Re-pricing of one venue at one proposed allocation."""

    venue: str
    allocation: float  # Requested spend
    filled: float  # Spend the venue actually absorbs
    shares: float
    marginal_price: float
    average_price: float
    depth_exhausted: bool

    def to_dict(self) -> dict:
        return {
            "venue": self.venue,
            "allocation": self.allocation,
            "filled": self.filled,
            "shares": self.shares,
            "marginal_price": self.marginal_price,
            "average_price": self.average_price,
            "depth_exhausted": self.depth_exhausted,
        }


class PricingModel(ABC):
    """Buy-side pricing for one outcome at one venue."""

    #: "order_book" or "lmsr"
    venue: str = ""

    @property
    @abstractmethod
    def platform_name(self) -> str:
        ...

    @property
    @abstractmethod
    def capacity(self) -> float:
        """Maximum collateral the venue can absorb (``inf`` if unbounded)."""

    @property
    @abstractmethod
    def min_price(self) -> float:
        """Marginal price of the very first share."""

    @abstractmethod
    def shares_for_budget(self, amount: float) -> float:
        """Shares bought by spending ``amount`` (capped at capacity)."""

    @abstractmethod
    def marginal_price(self, cumulative_spend: float) -> float:
        """Price of the next infinitesimal share after ``cumulative_spend``."""

    @abstractmethod
    def spend_at_price(self, price: float) -> float:
        """Largest spend whose marginal price stays at or below ``price``."""

    @property
    def has_liquidity(self) -> bool:
        return self.capacity > 0

    def quote(self, allocation: float, digits: int = 6) -> Quote:
        """Price a proposed allocation with the same functions the optimizer uses."""
        allocation = max(0.0, float(allocation))
        filled = min(allocation, self.capacity)
        shares = self.shares_for_budget(filled)
        average_price = filled / shares if shares > 0 else 0.0
        return Quote(
            venue=self.venue,
            allocation=round(allocation, digits),
            filled=round(filled, digits),
            shares=round(shares, digits),
            marginal_price=round(self.marginal_price(filled), digits),
            average_price=round(average_price, digits),
            depth_exhausted=math.isfinite(self.capacity) and allocation >= self.capacity,
        )
