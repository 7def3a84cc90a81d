import logging
from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings

# Get the directory where this config file is located.
_BACKEND_DIR = Path(__file__).parent.resolve()
_PROJECT_ROOT = _BACKEND_DIR.parent.resolve()
_LOGGER = logging.getLogger(__name__)


class Settings(BaseSettings):
    # Logging / API
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = True
    CORS_ORIGINS: list[str] = ["*"]

    # Order Book Synthesis
    # The ladder is synthesized from aggregate statistics, not a depth feed.
    SPLIT_ORDER_BOOK_LEVELS: int = 10
    SPLIT_ORDER_BOOK_PRICE_FLOOR: float = 0.40  # First-level price for a balanced market
    SPLIT_ORDER_BOOK_PRICE_CEILING: float = 0.95  # Deepest level price
    SPLIT_ORDER_BOOK_CONVEXITY: float = 2.0  # >1 makes deeper levels disproportionately pricier
    SPLIT_ORDER_BOOK_MAX_SKEW_SHIFT: float = 0.10  # Max base price move from buy/sell skew
    SPLIT_ORDER_BOOK_DECAY_MIN: float = 0.6  # Size ratio for few-large-trade markets
    SPLIT_ORDER_BOOK_DECAY_MAX: float = 0.9  # Size ratio for many-small-trade markets
    SPLIT_ORDER_BOOK_DEPTH_MULTIPLIER: float = 1.0  # Shares of depth per unit of buy volume
    SPLIT_ORDER_BOOK_MIN_LEVEL_SIZE: float = 1e-6  # Placeholder depth for zero-volume markets

    # LMSR Synthesis
    SPLIT_LMSR_MIN_LIQUIDITY: float = 100.0  # Floor on b; avoids extreme price spikes
    SPLIT_LMSR_VOLUME_SCALE: float = 0.1  # b per unit of collateral volume
    SPLIT_LMSR_PROBABILITY_CLAMP: float = 0.01  # Implied price kept in [clamp, 1 - clamp]

    # Split Optimizer
    SPLIT_BISECTION_MAX_ITERATIONS: int = 200
    SPLIT_BISECTION_BUDGET_TOLERANCE: float = 1e-6
    SPLIT_BISECTION_PRICE_TOLERANCE: float = 1e-12
    SPLIT_BALANCED_THRESHOLD: float = 0.15  # |order book share - 50%| below this is "balanced"
    SPLIT_ROUNDING_DIGITS: int = 6

    @field_validator(
        "SPLIT_ORDER_BOOK_PRICE_FLOOR",
        "SPLIT_ORDER_BOOK_PRICE_CEILING",
        "SPLIT_ORDER_BOOK_DECAY_MIN",
        "SPLIT_ORDER_BOOK_DECAY_MAX",
        "SPLIT_LMSR_PROBABILITY_CLAMP",
        "SPLIT_BALANCED_THRESHOLD",
    )
    @classmethod
    def _validate_unit_interval(cls, value: float, info) -> float:
        if not 0 < value < 1:
            raise ValueError(f"{info.field_name} must be between 0 and 1 (exclusive)")
        return value

    @field_validator(
        "SPLIT_ORDER_BOOK_LEVELS",
        "SPLIT_BISECTION_MAX_ITERATIONS",
        "SPLIT_ORDER_BOOK_CONVEXITY",
        "SPLIT_ORDER_BOOK_DEPTH_MULTIPLIER",
        "SPLIT_ORDER_BOOK_MIN_LEVEL_SIZE",
        "SPLIT_LMSR_MIN_LIQUIDITY",
        "SPLIT_LMSR_VOLUME_SCALE",
        "SPLIT_BISECTION_BUDGET_TOLERANCE",
        "SPLIT_BISECTION_PRICE_TOLERANCE",
    )
    @classmethod
    def _validate_positive(cls, value, info):
        if value <= 0:
            raise ValueError(f"{info.field_name} must be positive")
        return value

    @field_validator("SPLIT_ROUNDING_DIGITS")
    @classmethod
    def _validate_rounding_digits(cls, value: int) -> int:
        if not 0 <= value <= 12:
            raise ValueError("SPLIT_ROUNDING_DIGITS must be between 0 and 12")
        return value

    @field_validator("LOG_LEVEL")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        level = str(value or "INFO").strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            _LOGGER.warning("Unknown LOG_LEVEL %r, falling back to INFO", value)
            return "INFO"
        return level

    class Config:
        # Load project-root .env first (common workflow), then backend/.env
        # as an override if present.
        env_file = (
            str(_PROJECT_ROOT / ".env"),
            str(_BACKEND_DIR / ".env"),
        )
        env_file_encoding = "utf-8"
        extra = "ignore"


settings = Settings()
