"""
Split router: entry points over the optimization engine.

Three operations share one set of synthesized pricing models:

- optimize: share-maximizing split of a budget across the two venues
- quote: re-price a single venue at an arbitrary allocation
- preview: full result for a manually chosen split (the UI slider)

Because preview and quote go through the same ``PricingModel`` objects the
optimizer uses, a preview at the optimizer's allocation reproduces the
optimizer's figures exactly.

The order book venue is Polymarket-style (CLOB); the LMSR venue is
Omen-style (automated market maker). Every call is stateless: models are
rebuilt from the supplied statistics each time.
"""

import math
from typing import Any, Optional, Union

from config import Settings, settings
from services.optimization import (
    LMSRPricing,
    LMSRSynthesizer,
    NoMarketData,
    OrderBookPricing,
    OrderBookSynthesizer,
    Outcome,
    PricingModel,
    Quote,
    SplitOptimizer,
    SplitResult,
    assemble_split_result,
    build_training_record,
    normalize_stats,
    validate_budget,
)
from services.optimization.market_stats import RawStatistics
from services.optimization.split_optimizer import round_down

DEFAULT_ORDER_BOOK_NAME = "Polymarket OrderBook"
DEFAULT_LMSR_NAME = "Omen LMSR"

VENUE_ORDER_BOOK = "order_book"
VENUE_LMSR = "lmsr"


class SplitRouter:
    """Budget split optimization and re-pricing across an order book and an LMSR venue."""

    def __init__(
        self,
        order_book_synthesizer: Optional[OrderBookSynthesizer] = None,
        lmsr_synthesizer: Optional[LMSRSynthesizer] = None,
        optimizer: Optional[SplitOptimizer] = None,
        balanced_threshold: float = 0.15,
        rounding_digits: int = 6,
    ):
        self.order_book_synthesizer = order_book_synthesizer or OrderBookSynthesizer()
        self.lmsr_synthesizer = lmsr_synthesizer or LMSRSynthesizer()
        self.optimizer = optimizer or SplitOptimizer(rounding_digits=rounding_digits)
        self.balanced_threshold = balanced_threshold
        self.rounding_digits = rounding_digits

    @classmethod
    def from_settings(cls, config: Settings = settings) -> "SplitRouter":
        return cls(
            order_book_synthesizer=OrderBookSynthesizer(
                levels=config.SPLIT_ORDER_BOOK_LEVELS,
                price_floor=config.SPLIT_ORDER_BOOK_PRICE_FLOOR,
                price_ceiling=config.SPLIT_ORDER_BOOK_PRICE_CEILING,
                convexity=config.SPLIT_ORDER_BOOK_CONVEXITY,
                max_skew_shift=config.SPLIT_ORDER_BOOK_MAX_SKEW_SHIFT,
                decay_min=config.SPLIT_ORDER_BOOK_DECAY_MIN,
                decay_max=config.SPLIT_ORDER_BOOK_DECAY_MAX,
                depth_multiplier=config.SPLIT_ORDER_BOOK_DEPTH_MULTIPLIER,
                min_level_size=config.SPLIT_ORDER_BOOK_MIN_LEVEL_SIZE,
            ),
            lmsr_synthesizer=LMSRSynthesizer(
                min_liquidity=config.SPLIT_LMSR_MIN_LIQUIDITY,
                volume_scale=config.SPLIT_LMSR_VOLUME_SCALE,
                probability_clamp=config.SPLIT_LMSR_PROBABILITY_CLAMP,
            ),
            optimizer=SplitOptimizer(
                max_iterations=config.SPLIT_BISECTION_MAX_ITERATIONS,
                budget_tolerance=config.SPLIT_BISECTION_BUDGET_TOLERANCE,
                price_tolerance=config.SPLIT_BISECTION_PRICE_TOLERANCE,
                rounding_digits=config.SPLIT_ROUNDING_DIGITS,
            ),
            balanced_threshold=config.SPLIT_BALANCED_THRESHOLD,
            rounding_digits=config.SPLIT_ROUNDING_DIGITS,
        )

    # ------------------------------------------------------------------
    # Model synthesis
    # ------------------------------------------------------------------

    def build_order_book(
        self,
        stats: RawStatistics,
        outcome: Union[Outcome, str, int] = Outcome.YES,
        platform_name: str = DEFAULT_ORDER_BOOK_NAME,
    ) -> Optional[OrderBookPricing]:
        normalized = normalize_stats(stats, default_id="polymarket-market")
        if normalized is None:
            return None
        book = self.order_book_synthesizer.synthesize(
            normalized, platform_name, Outcome.parse(outcome)
        )
        return OrderBookPricing(book)

    def build_lmsr(
        self,
        stats: RawStatistics,
        outcome: Union[Outcome, str, int] = Outcome.YES,
        platform_name: str = DEFAULT_LMSR_NAME,
    ) -> Optional[LMSRPricing]:
        normalized = normalize_stats(stats, default_id="omen-market")
        if normalized is None:
            return None
        market = self.lmsr_synthesizer.synthesize(normalized, platform_name)
        return LMSRPricing(market, Outcome.parse(outcome))

    def build_models(
        self,
        order_book_stats: RawStatistics = None,
        lmsr_stats: RawStatistics = None,
        outcome: Union[Outcome, str, int] = Outcome.YES,
        order_book_name: str = DEFAULT_ORDER_BOOK_NAME,
        lmsr_name: str = DEFAULT_LMSR_NAME,
    ) -> tuple[Optional[OrderBookPricing], Optional[LMSRPricing]]:
        if order_book_stats is None and lmsr_stats is None:
            raise NoMarketData(
                "At least one market data source (order book or LMSR) is required"
            )
        return (
            self.build_order_book(order_book_stats, outcome, order_book_name),
            self.build_lmsr(lmsr_stats, outcome, lmsr_name),
        )

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    def optimize(
        self,
        budget: Any,
        order_book_stats: RawStatistics = None,
        lmsr_stats: RawStatistics = None,
        outcome: Union[Outcome, str, int] = Outcome.YES,
        order_book_name: str = DEFAULT_ORDER_BOOK_NAME,
        lmsr_name: str = DEFAULT_LMSR_NAME,
    ) -> SplitResult:
        """Share-maximizing split of ``budget`` across the available venues."""
        budget = validate_budget(budget)
        outcome = Outcome.parse(outcome)
        order_book, lmsr = self.build_models(
            order_book_stats, lmsr_stats, outcome, order_book_name, lmsr_name
        )

        allocation = self.optimizer.solve(budget, order_book, lmsr)

        return assemble_split_result(
            budget=budget,
            order_book=order_book,
            lmsr=lmsr,
            order_book_allocation=allocation.order_book_allocation,
            lmsr_allocation=allocation.lmsr_allocation,
            strategy_threshold=self.balanced_threshold,
            is_optimal=True,
            iterations=allocation.iterations,
            clearing_price=allocation.clearing_price,
            outcome=outcome.value,
            digits=self.rounding_digits,
        )

    def quote(self, model: PricingModel, allocation: float) -> Quote:
        """Re-price one venue at ``allocation`` with the optimizer's own pricing."""
        return model.quote(allocation, self.rounding_digits)

    def quote_venue(
        self,
        venue: str,
        stats: RawStatistics,
        allocation: float,
        outcome: Union[Outcome, str, int] = Outcome.YES,
    ) -> Quote:
        """Synthesize a single venue from ``stats`` and quote it."""
        if venue == VENUE_ORDER_BOOK:
            model = self.build_order_book(stats, outcome)
        elif venue == VENUE_LMSR:
            model = self.build_lmsr(stats, outcome)
        else:
            raise ValueError(f"Unknown venue: {venue!r}")
        if model is None:
            raise NoMarketData(f"No statistics supplied for {venue} venue")
        return self.quote(model, allocation)

    def preview(
        self,
        budget: Any,
        order_book_allocation: float,
        order_book_stats: RawStatistics = None,
        lmsr_stats: RawStatistics = None,
        outcome: Union[Outcome, str, int] = Outcome.YES,
    ) -> SplitResult:
        """
        Price a manually chosen split.

        ``order_book_allocation`` is clamped to [0, budget] and the rest goes
        to the LMSR venue. A missing venue receives nothing.
        """
        budget = validate_budget(budget)
        outcome = Outcome.parse(outcome)
        order_book, lmsr = self.build_models(order_book_stats, lmsr_stats, outcome)

        digits = self.rounding_digits
        order_book_allocation = float(order_book_allocation)
        if not math.isfinite(order_book_allocation):
            raise ValueError("order_book_allocation must be a finite number")
        order_book_allocation = min(max(order_book_allocation, 0.0), budget)
        if order_book is None:
            order_book_allocation = 0.0
        order_book_allocation = round_down(order_book_allocation, digits)
        lmsr_allocation = (
            round_down(budget - order_book_allocation, digits) if lmsr is not None else 0.0
        )

        return assemble_split_result(
            budget=budget,
            order_book=order_book,
            lmsr=lmsr,
            order_book_allocation=order_book_allocation,
            lmsr_allocation=lmsr_allocation,
            strategy_threshold=self.balanced_threshold,
            is_optimal=False,
            outcome=outcome.value,
            digits=digits,
        )

    def training_record(
        self,
        budget: float,
        order_book_stats: RawStatistics,
        lmsr_stats: RawStatistics,
        result: SplitResult,
        category: Optional[str] = None,
    ) -> dict:
        """Feature/target record for the history exporter."""
        return build_training_record(
            budget,
            normalize_stats(order_book_stats, default_id="polymarket-market"),
            normalize_stats(lmsr_stats, default_id="omen-market"),
            result,
            category,
        )


# Singleton instance
split_router = SplitRouter.from_settings(settings)
