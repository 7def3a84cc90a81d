"""
Optimization module for splitting a budget across prediction market venues.

Two venues with structurally different pricing are supported:

- an order book venue (discrete ask ladder, step-function marginal price)
- an LMSR venue (automated market maker, smooth closed-form pricing)

Neither venue exposes real depth through the subgraphs we read, so both
pricing models are synthesized from aggregate trade statistics.

Components:
- market_stats: Normalization of raw subgraph statistics
- order_book: Synthetic ask ladder and ladder-walking pricing
- lmsr: Synthetic LMSR state and closed-form pricing
- pricing: Shared PricingModel contract and Quote
- split_optimizer: Marginal-price equalization (water-filling) by bisection
- split_result: SplitResult assembly and training-record export shape
"""

from .errors import SplitRouterError, InvalidBudget, NoMarketData, UnsolvableBisection
from .market_stats import MarketStatistics, Outcome, normalize_stats
from .pricing import PricingModel, Quote
from .order_book import OrderBook, OrderBookLevel, OrderBookPricing, OrderBookSynthesizer
from .lmsr import LMSRMarket, LMSRPricing, LMSRSynthesizer
from .split_optimizer import (
    SplitAllocation, SplitOptimizer, SplitStrategy, strategy_label, validate_budget
)
from .split_result import SplitResult, assemble_split_result, build_training_record

__all__ = [
    # Errors
    "SplitRouterError",
    "InvalidBudget",
    "NoMarketData",
    "UnsolvableBisection",
    # Statistics
    "MarketStatistics",
    "Outcome",
    "normalize_stats",
    # Pricing
    "PricingModel",
    "Quote",
    # Order Book
    "OrderBook",
    "OrderBookLevel",
    "OrderBookPricing",
    "OrderBookSynthesizer",
    # LMSR
    "LMSRMarket",
    "LMSRPricing",
    "LMSRSynthesizer",
    # Split
    "SplitAllocation",
    "SplitOptimizer",
    "SplitStrategy",
    "strategy_label",
    "validate_budget",
    "SplitResult",
    "assemble_split_result",
    "build_training_record",
]
