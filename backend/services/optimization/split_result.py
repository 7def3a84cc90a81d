"""Packaging of a budget split into the shape consumed by the UI and exporters."""

from dataclasses import dataclass, field
from typing import Optional

from .lmsr import LMSRPricing
from .market_stats import MarketStatistics
from .order_book import OrderBookPricing
from .split_optimizer import SplitStrategy, strategy_label


@dataclass
class SplitResult:
    """A budget split with shares, cost and efficiency figures."""

    budget: float
    order_book_allocation: float
    lmsr_allocation: float
    order_book_shares: float
    lmsr_shares: float
    order_book_marginal_price: Optional[float]
    lmsr_marginal_price: Optional[float]
    total_shares: float
    total_cost: float
    strategy: SplitStrategy
    cost_per_share: float
    order_book_percent: float
    lmsr_percent: float
    order_book_summary: Optional[dict] = None
    lmsr_summary: Optional[dict] = None
    is_optimal: bool = True
    iterations: int = 0
    clearing_price: Optional[float] = None
    outcome: str = "yes"
    warnings: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "budget": self.budget,
            "outcome": self.outcome,
            "order_book_allocation": self.order_book_allocation,
            "lmsr_allocation": self.lmsr_allocation,
            "order_book_shares": self.order_book_shares,
            "lmsr_shares": self.lmsr_shares,
            "order_book_marginal_price": self.order_book_marginal_price,
            "lmsr_marginal_price": self.lmsr_marginal_price,
            "total_shares": self.total_shares,
            "total_cost": self.total_cost,
            "strategy": self.strategy.value,
            "is_optimal": self.is_optimal,
            "iterations": self.iterations,
            "clearing_price": self.clearing_price,
            "platform_data": {
                "order_book": self.order_book_summary,
                "lmsr": self.lmsr_summary,
            },
            "efficiency": {
                "cost_per_share": self.cost_per_share,
                "allocation_ratio": {
                    "order_book_percent": self.order_book_percent,
                    "lmsr_percent": self.lmsr_percent,
                },
            },
            "warnings": list(self.warnings),
        }


def assemble_split_result(
    budget: float,
    order_book: Optional[OrderBookPricing],
    lmsr: Optional[LMSRPricing],
    order_book_allocation: float,
    lmsr_allocation: float,
    strategy_threshold: float = 0.15,
    is_optimal: bool = True,
    iterations: int = 0,
    clearing_price: Optional[float] = None,
    outcome: str = "yes",
    digits: int = 6,
) -> SplitResult:
    """
    Attach shares, cost and venue summaries to an allocation.

    Shares and marginal prices come from the same ``quote`` path that
    standalone re-pricing uses, so a preview at this allocation always
    reports the same figures.
    """
    warnings: list[str] = []

    order_book_shares = 0.0
    order_book_price = None
    order_book_filled = 0.0
    if order_book is not None:
        quote = order_book.quote(order_book_allocation, digits)
        order_book_shares = quote.shares
        order_book_price = quote.marginal_price
        order_book_filled = quote.filled
        if quote.depth_exhausted:
            warnings.append("order book depth exhausted")
    elif order_book_allocation > 0:
        warnings.append("order book venue unavailable; allocation not filled")

    lmsr_shares = 0.0
    lmsr_price = None
    lmsr_filled = 0.0
    if lmsr is not None:
        quote = lmsr.quote(lmsr_allocation, digits)
        lmsr_shares = quote.shares
        lmsr_price = quote.marginal_price
        lmsr_filled = quote.filled
    elif lmsr_allocation > 0:
        warnings.append("lmsr venue unavailable; allocation not filled")

    total_shares = round(order_book_shares + lmsr_shares, digits)
    total_cost = round(order_book_filled + lmsr_filled, digits)

    return SplitResult(
        budget=budget,
        order_book_allocation=order_book_allocation,
        lmsr_allocation=lmsr_allocation,
        order_book_shares=order_book_shares,
        lmsr_shares=lmsr_shares,
        order_book_marginal_price=order_book_price,
        lmsr_marginal_price=lmsr_price,
        total_shares=total_shares,
        total_cost=total_cost,
        strategy=strategy_label(order_book_allocation, lmsr_allocation, strategy_threshold),
        cost_per_share=round(total_cost / total_shares, digits) if total_shares > 0 else 0.0,
        order_book_percent=round(order_book_allocation / budget * 100, 4) if budget > 0 else 0.0,
        lmsr_percent=round(lmsr_allocation / budget * 100, 4) if budget > 0 else 0.0,
        order_book_summary=order_book.book.summary(digits) if order_book is not None else None,
        lmsr_summary=lmsr.market.summary(digits) if lmsr is not None else None,
        is_optimal=is_optimal,
        iterations=iterations,
        clearing_price=round(clearing_price, digits) if clearing_price is not None else None,
        outcome=outcome,
        warnings=warnings,
    )


def _input_features(prefix: str, stats: Optional[MarketStatistics]) -> dict:
    if stats is None:
        return {
            f"{prefix}_volume": 0.0,
            f"{prefix}_trade_ratio": 0.0,
            f"{prefix}_buy_sell_ratio": 0.0,
        }
    return {
        f"{prefix}_volume": stats.collateral_volume,
        f"{prefix}_trade_ratio": stats.trade_ratio,
        f"{prefix}_buy_sell_ratio": stats.buy_sell_count_ratio,
    }


def build_training_record(
    budget: float,
    order_book_stats: Optional[MarketStatistics],
    lmsr_stats: Optional[MarketStatistics],
    result: SplitResult,
    category: Optional[str] = None,
) -> dict:
    """Feature/target record for the split history exporter."""
    input_features = {"budget": budget}
    input_features.update(_input_features("order_book", order_book_stats))
    input_features.update(_input_features("lmsr", lmsr_stats))
    input_features["market_category"] = category

    return {
        "input_features": input_features,
        "output_targets": {
            "order_book_allocation": result.order_book_allocation,
            "lmsr_allocation": result.lmsr_allocation,
            "order_book_percent": result.order_book_percent,
            "lmsr_percent": result.lmsr_percent,
            "strategy": result.strategy.value,
            "cost_per_share": result.cost_per_share,
        },
        "performance_metrics": {
            "total_shares": result.total_shares,
            "total_cost": result.total_cost,
            "efficiency": result.cost_per_share,
        },
    }
