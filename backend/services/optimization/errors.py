"""Typed failures raised by the split router engine."""


class SplitRouterError(Exception):
    """Base class for split optimization failures."""

    pass


class InvalidBudget(SplitRouterError):
    """Raised when the budget is non-positive or not a finite number."""

    pass


class NoMarketData(SplitRouterError):
    """Raised when neither venue has statistics to build a liquidity model from."""

    pass


class UnsolvableBisection(SplitRouterError):
    """Raised when the marginal-price search exhausts its iteration cap."""

    pass
