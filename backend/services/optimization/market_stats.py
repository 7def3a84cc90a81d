"""
Aggregate trade statistics for a single venue.

Subgraph payloads arrive as loosely typed dicts: numbers, decimal strings,
nulls, or missing keys entirely. Everything here is normalized into a
``MarketStatistics`` record with non-negative floats so the synthesizers
downstream never have to guard individual fields.
"""

import math
from dataclasses import dataclass, replace
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Mapping, Optional, Union

# Used as the denominator floor when a ratio would otherwise divide by zero.
RATIO_EPSILON = 1e-9


class Outcome(str, Enum):
    YES = "yes"
    NO = "no"

    @classmethod
    def parse(cls, value: Any) -> "Outcome":
        """Accept "yes"/"no", Outcome members, or the 0/1 bet-outcome index."""
        if isinstance(value, Outcome):
            return value
        if isinstance(value, bool):
            raise ValueError(f"Invalid outcome: {value!r}")
        if isinstance(value, int):
            if value in (0, 1):
                return cls.YES if value == 0 else cls.NO
            raise ValueError(f"Invalid outcome index: {value}")
        text = str(value or "").strip().lower()
        try:
            return cls(text)
        except ValueError:
            raise ValueError(f"Invalid outcome: {value!r}") from None


# Subgraph (camelCase) key first, snake_case alias second.
_FIELD_ALIASES = {
    "trades_quantity": ("tradesQuantity", "trades_quantity", "trades"),
    "buys_quantity": ("buysQuantity", "buys_quantity", "buys"),
    "sells_quantity": ("sellsQuantity", "sells_quantity", "sells"),
    "collateral_volume": ("scaledCollateralVolume", "collateral_volume", "volume"),
    "collateral_buy_volume": (
        "scaledCollateralBuyVolume",
        "collateral_buy_volume",
        "buy_volume",
    ),
    "collateral_sell_volume": (
        "scaledCollateralSellVolume",
        "collateral_sell_volume",
        "sell_volume",
    ),
}


def safe_ratio(numerator: float, denominator: float, default: float = 1.0) -> float:
    """numerator / denominator, or ``default`` when the denominator is ~0."""
    if denominator <= RATIO_EPSILON:
        return default
    return numerator / denominator


def coerce_non_negative(value: Any) -> float:
    """Parse a number or decimal string, clamping anything unusable to 0.0."""
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        try:
            number = float(value)
        except OverflowError:
            return 0.0
    elif isinstance(value, Decimal):
        number = float(value) if value.is_finite() else 0.0
    else:
        text = str(value).strip()
        if not text:
            return 0.0
        try:
            number = float(Decimal(text))
        except (InvalidOperation, ValueError, OverflowError):
            return 0.0
    if not math.isfinite(number) or number < 0:
        return 0.0
    return number


@dataclass(frozen=True)
class MarketStatistics:
    """Normalized per-venue aggregates. All figures are non-negative."""

    id: str
    trades_quantity: float = 0.0
    buys_quantity: float = 0.0
    sells_quantity: float = 0.0
    collateral_volume: float = 0.0
    collateral_buy_volume: float = 0.0
    collateral_sell_volume: float = 0.0

    @property
    def effective_volume(self) -> float:
        # Buy + sell can exceed the reported total on noisy subgraph data.
        return max(
            self.collateral_volume,
            self.collateral_buy_volume + self.collateral_sell_volume,
        )

    @property
    def average_trade_size(self) -> float:
        return self.effective_volume / max(self.trades_quantity, 1.0)

    @property
    def buy_sell_volume_ratio(self) -> float:
        """Buy over sell collateral (1.0 when neither side traded)."""
        if self.collateral_buy_volume + self.collateral_sell_volume <= RATIO_EPSILON:
            return 1.0
        return self.collateral_buy_volume / max(self.collateral_sell_volume, RATIO_EPSILON)

    @property
    def buy_volume_share(self) -> float:
        """Fraction of directional volume on the buy side (0.5 when unknown)."""
        return safe_ratio(
            self.collateral_buy_volume,
            self.collateral_buy_volume + self.collateral_sell_volume,
            default=0.5,
        )

    @property
    def trade_ratio(self) -> float:
        """Trades per unit of collateral volume."""
        return self.trades_quantity / max(self.collateral_volume, 1.0)

    @property
    def buy_sell_count_ratio(self) -> float:
        return self.buys_quantity / max(self.sells_quantity, 1.0)

    @property
    def is_empty(self) -> bool:
        return self.effective_volume <= 0

    def mirrored(self) -> "MarketStatistics":
        """The same market seen from the opposite outcome: buy and sell sides swapped."""
        return replace(
            self,
            buys_quantity=self.sells_quantity,
            sells_quantity=self.buys_quantity,
            collateral_buy_volume=self.collateral_sell_volume,
            collateral_sell_volume=self.collateral_buy_volume,
        )


RawStatistics = Union[Mapping[str, Any], MarketStatistics, None]


def normalize_stats(
    raw: RawStatistics, default_id: str = "market"
) -> Optional[MarketStatistics]:
    """
    Build a ``MarketStatistics`` record from raw subgraph figures.

    Returns None only when ``raw`` itself is None (venue absent). Malformed
    individual fields never raise; they degrade to zero.
    """
    if raw is None:
        return None
    if isinstance(raw, MarketStatistics):
        return raw
    if not isinstance(raw, Mapping):
        return MarketStatistics(id=default_id)

    values: dict[str, float] = {}
    for field_name, aliases in _FIELD_ALIASES.items():
        raw_value = None
        for key in aliases:
            if raw.get(key) is not None:
                raw_value = raw.get(key)
                break
        values[field_name] = coerce_non_negative(raw_value)

    market_id = str(raw.get("id") or "").strip() or default_id
    return MarketStatistics(id=market_id, **values)
