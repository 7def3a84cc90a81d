import json
import logging
import sys
from pathlib import Path

import pytest
from pydantic import ValidationError

BACKEND_ROOT = Path(__file__).resolve().parents[1]
if str(BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(BACKEND_ROOT))

from config import Settings
from utils.logger import ContextLogger, JSONFormatter


def test_split_defaults():
    config = Settings()
    assert config.SPLIT_ORDER_BOOK_LEVELS == 10
    assert config.SPLIT_LMSR_MIN_LIQUIDITY == 100.0
    assert config.SPLIT_BALANCED_THRESHOLD == 0.15
    assert config.SPLIT_ROUNDING_DIGITS == 6


def test_split_settings_read_environment(monkeypatch):
    monkeypatch.setenv("SPLIT_ORDER_BOOK_LEVELS", "6")
    monkeypatch.setenv("SPLIT_LMSR_VOLUME_SCALE", "0.25")

    config = Settings()
    assert config.SPLIT_ORDER_BOOK_LEVELS == 6
    assert config.SPLIT_LMSR_VOLUME_SCALE == 0.25


@pytest.mark.parametrize(
    "overrides",
    [
        {"SPLIT_ORDER_BOOK_LEVELS": 0},
        {"SPLIT_ORDER_BOOK_PRICE_CEILING": 1.5},
        {"SPLIT_LMSR_PROBABILITY_CLAMP": 0},
        {"SPLIT_BISECTION_MAX_ITERATIONS": -1},
        {"SPLIT_ROUNDING_DIGITS": 20},
    ],
)
def test_invalid_split_settings_rejected(overrides):
    with pytest.raises(ValidationError):
        Settings(**overrides)


def test_unknown_log_level_falls_back_to_info():
    assert Settings(LOG_LEVEL="chatty").LOG_LEVEL == "INFO"
    assert Settings(LOG_LEVEL="debug").LOG_LEVEL == "DEBUG"


def test_context_logger_emits_structured_fields(caplog):
    logger = ContextLogger("split_test").with_context(request_id="abc")

    with caplog.at_level(logging.INFO, logger="split_test"):
        logger.info("Split optimized", budget=1000)

    record = caplog.records[-1]
    assert record.extra_data == {"request_id": "abc", "budget": 1000}

    payload = json.loads(JSONFormatter().format(record))
    assert payload["message"] == "Split optimized"
    assert payload["data"]["budget"] == 1000
    assert payload["timestamp"].endswith("Z")
