"""
Budget split across an order book venue and an LMSR venue.

Both venues have non-decreasing marginal price as spend grows, so the
share-maximizing split of a fixed budget is the one that equalizes marginal
price across venues ("water-filling"). Instead of searching over
allocations directly, we search over the common price level p*:

    S(p) = Σ_venues spend_at_price(p)

S is non-decreasing in p, so bisection finds the p* where S(p*) = budget.
The order book makes S a step function; when p* lands on a ladder level the
excess S(p*) − budget is taken back from the venue(s) whose spend jumped,
which is a partial fill of that level.

Corner cases:
- one venue missing or empty: the other gets everything it can absorb
- the ladder is swept before prices converge: the LMSR venue absorbs the rest
"""

import math
from dataclasses import dataclass
from decimal import ROUND_DOWN, Context, Decimal
from enum import Enum
from typing import Any, Optional

from .errors import InvalidBudget, NoMarketData, UnsolvableBisection
from .pricing import PricingModel

# Highest price the search probes. LMSR prices approach 1 asymptotically.
PRICE_CEILING = 1.0 - 1e-12


class SplitStrategy(str, Enum):
    ORDER_BOOK_ONLY = "order-book-only"
    ORDER_BOOK_HEAVY = "order-book-heavy"
    BALANCED = "balanced"
    LMSR_HEAVY = "lmsr-heavy"
    LMSR_ONLY = "lmsr-only"
    NONE = "none"


@dataclass
class SplitAllocation:
    """Raw optimizer output, before shares and metrics are attached."""
    order_book_allocation: float
    lmsr_allocation: float
    clearing_price: Optional[float]  # p* at which marginal prices meet
    iterations: int
    corner: bool  # True when one venue is absent or saturated


def validate_budget(budget: Any) -> float:
    """Return the budget as a float or raise InvalidBudget."""
    if isinstance(budget, bool):
        raise InvalidBudget(f"Budget must be a number, got {budget!r}")
    try:
        value = float(budget)
    except (TypeError, ValueError):
        raise InvalidBudget(f"Budget must be a number, got {budget!r}") from None
    if not math.isfinite(value) or value <= 0:
        raise InvalidBudget(f"Budget must be a positive finite number, got {budget!r}")
    return value


def round_down(value: float, digits: int) -> float:
    """Truncate toward zero at ``digits`` decimals so sums never exceed the budget."""
    quantum = Decimal(1).scaleb(-digits)
    number = Decimal(repr(value))
    # Enough precision to hold every integer digit plus the kept decimals.
    context = Context(prec=max(28, number.adjusted() + digits + 2))
    return float(number.quantize(quantum, rounding=ROUND_DOWN, context=context))


def strategy_label(
    order_book_allocation: float,
    lmsr_allocation: float,
    threshold: float = 0.15,
) -> SplitStrategy:
    """Categorize an allocation by its order book share."""
    total = order_book_allocation + lmsr_allocation
    if total <= 0:
        return SplitStrategy.NONE
    if lmsr_allocation <= 0:
        return SplitStrategy.ORDER_BOOK_ONLY
    if order_book_allocation <= 0:
        return SplitStrategy.LMSR_ONLY

    order_book_share = order_book_allocation / total
    if order_book_share > 0.5 + threshold:
        return SplitStrategy.ORDER_BOOK_HEAVY
    if order_book_share < 0.5 - threshold:
        return SplitStrategy.LMSR_HEAVY
    return SplitStrategy.BALANCED


class SplitOptimizer:
    """
    Marginal-price equalization by bisection.

    Args:
        max_iterations: Hard cap on bisection steps
        budget_tolerance: Stop once |S(p) - budget| falls below this
        price_tolerance: Stop once the price bracket is narrower than this
        rounding_digits: Decimals kept on reported allocations
    """

    def __init__(
        self,
        max_iterations: int = 200,
        budget_tolerance: float = 1e-6,
        price_tolerance: float = 1e-12,
        rounding_digits: int = 6,
    ):
        self.max_iterations = max_iterations
        self.budget_tolerance = budget_tolerance
        self.price_tolerance = price_tolerance
        self.rounding_digits = rounding_digits

    def solve(
        self,
        budget: float,
        order_book: Optional[PricingModel],
        lmsr: Optional[PricingModel],
    ) -> SplitAllocation:
        budget = validate_budget(budget)

        venues = [order_book, lmsr]
        # Depth smaller than one rounding quantum could never receive an allocation.
        min_capacity = 10 ** -self.rounding_digits
        active = [
            i
            for i, m in enumerate(venues)
            if m is not None and m.has_liquidity and m.capacity >= min_capacity
        ]
        if not active:
            raise NoMarketData("Neither venue has liquidity to allocate the budget to")

        spends, clearing_price, iterations, corner = self._water_fill(
            budget, [venues[i] for i in active]
        )

        allocations = [0.0, 0.0]
        for i, spend in zip(active, spends):
            allocations[i] = round_down(max(0.0, spend), self.rounding_digits)

        return SplitAllocation(
            order_book_allocation=allocations[0],
            lmsr_allocation=allocations[1],
            clearing_price=clearing_price,
            iterations=iterations,
            corner=corner,
        )

    def _water_fill(
        self, budget: float, models: list[PricingModel]
    ) -> tuple[list[float], Optional[float], int, bool]:
        if len(models) == 1:
            return [min(budget, models[0].capacity)], None, 0, True

        capacities = [m.capacity for m in models]
        if all(math.isfinite(c) for c in capacities) and sum(capacities) <= budget:
            return capacities, None, 0, True

        hi = PRICE_CEILING
        spends_hi = self._spends(models, hi)
        if sum(spends_hi) < budget:
            return self._pour_remainder(budget, models, spends_hi), hi, 0, True

        lo = 0.0
        matched = False
        iterations = 0
        for iterations in range(1, self.max_iterations + 1):
            mid = (lo + hi) / 2
            total = sum(self._spends(models, mid))

            if abs(total - budget) <= self.budget_tolerance:
                lo = hi = mid
                matched = True
                break
            if total < budget:
                lo = mid
            else:
                hi = mid
            if hi - lo <= self.price_tolerance:
                break
        else:
            raise UnsolvableBisection(
                f"Marginal price search did not converge in {self.max_iterations} iterations "
                f"(bracket [{lo:.12f}, {hi:.12f}])"
            )

        spends = self._resolve_step(budget, models, lo, hi, matched)
        corner = any(
            math.isfinite(m.capacity) and s >= m.capacity for m, s in zip(models, spends)
        )
        return spends, hi, iterations, corner

    @staticmethod
    def _spends(models: list[PricingModel], price: float) -> list[float]:
        return [m.spend_at_price(price) for m in models]

    def _resolve_step(
        self,
        budget: float,
        models: list[PricingModel],
        lo: float,
        hi: float,
        matched: bool,
    ) -> list[float]:
        spends_hi = self._spends(models, hi)
        total_hi = sum(spends_hi)
        excess = total_hi - budget

        if excess <= 0:
            # Within tolerance below budget; top up whichever venue is unbounded.
            return self._pour_remainder(budget, models, spends_hi)

        spends_lo = spends_hi if matched else self._spends(models, lo)
        jumps = [h - low for h, low in zip(spends_hi, spends_lo)]
        total_jump = sum(jumps)
        if total_jump > 0 and total_jump >= excess:
            return [h - excess * j / total_jump for h, j in zip(spends_hi, jumps)]

        # Within tolerance above budget; trim the unbounded venues, leave ladders filled.
        unbounded_spend = sum(
            h for m, h in zip(models, spends_hi) if not math.isfinite(m.capacity)
        )
        if unbounded_spend >= excess:
            return self._pour_remainder(budget, models, spends_hi)
        return [h - excess * h / total_hi for h in spends_hi]

    @staticmethod
    def _pour_remainder(
        budget: float, models: list[PricingModel], spends: list[float]
    ) -> list[float]:
        """Spread ``budget - sum(spends)`` (either sign) over the unbounded venues."""
        remainder = budget - sum(spends)
        unbounded = [i for i, m in enumerate(models) if not math.isfinite(m.capacity)]
        if remainder == 0 or not unbounded:
            return list(spends)

        weights = [spends[i] for i in unbounded]
        total_weight = sum(weights)
        result = list(spends)
        for i, weight in zip(unbounded, weights):
            share = weight / total_weight if total_weight > 0 else 1 / len(unbounded)
            result[i] += remainder * share
        return result
