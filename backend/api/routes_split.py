"""Optimal split routes: optimize, quote, manual-split preview and agent actions."""

from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from services.optimization import (
    InvalidBudget,
    NoMarketData,
    SplitRouterError,
    UnsolvableBisection,
)
from services.split_actions import available_actions, execute_action
from services.split_router import VENUE_LMSR, VENUE_ORDER_BOOK, split_router
from utils.logger import split_logger as logger

router = APIRouter(prefix="/split", tags=["Optimal Split"])

_OUTCOME_PATTERN = "^(yes|no)$"


class OptimizeRequest(BaseModel):
    budget: float = Field(..., gt=0)
    order_book_stats: Optional[dict[str, Any]] = None
    lmsr_stats: Optional[dict[str, Any]] = None
    outcome: str = Field(default="yes", pattern=_OUTCOME_PATTERN)
    include_training_record: bool = False
    market_category: Optional[str] = None


class QuoteRequest(BaseModel):
    venue: str = Field(..., pattern=f"^({VENUE_ORDER_BOOK}|{VENUE_LMSR})$")
    stats: dict[str, Any]
    allocation: float = Field(..., ge=0)
    outcome: str = Field(default="yes", pattern=_OUTCOME_PATTERN)


class PreviewRequest(BaseModel):
    budget: float = Field(..., gt=0)
    order_book_allocation: float = Field(..., ge=0)
    order_book_stats: Optional[dict[str, Any]] = None
    lmsr_stats: Optional[dict[str, Any]] = None
    outcome: str = Field(default="yes", pattern=_OUTCOME_PATTERN)


def _raise_http(e: SplitRouterError) -> None:
    if isinstance(e, InvalidBudget):
        raise HTTPException(status_code=400, detail=str(e))
    if isinstance(e, NoMarketData):
        raise HTTPException(status_code=422, detail=str(e))
    if isinstance(e, UnsolvableBisection):
        logger.error("Split optimization did not converge", error=str(e))
        raise HTTPException(status_code=500, detail=str(e))
    raise HTTPException(status_code=500, detail=str(e))


@router.post("/optimize")
async def optimize_split(request: OptimizeRequest):
    """Share-maximizing split of a budget between the order book and LMSR venues"""
    try:
        result = split_router.optimize(
            budget=request.budget,
            order_book_stats=request.order_book_stats,
            lmsr_stats=request.lmsr_stats,
            outcome=request.outcome,
        )
    except SplitRouterError as e:
        logger.warning("Split optimization rejected", error=str(e))
        _raise_http(e)

    logger.info(
        "Split optimized",
        budget=request.budget,
        strategy=result.strategy.value,
        order_book_allocation=result.order_book_allocation,
        lmsr_allocation=result.lmsr_allocation,
        iterations=result.iterations,
    )
    payload = result.to_dict()
    if request.include_training_record:
        payload["training_record"] = split_router.training_record(
            request.budget,
            request.order_book_stats,
            request.lmsr_stats,
            result,
            request.market_category,
        )
    return payload


@router.post("/quote")
async def quote_venue(request: QuoteRequest):
    """Shares and marginal price for one venue at a proposed allocation"""
    try:
        quote = split_router.quote_venue(
            venue=request.venue,
            stats=request.stats,
            allocation=request.allocation,
            outcome=request.outcome,
        )
    except SplitRouterError as e:
        _raise_http(e)
    return quote.to_dict()


@router.post("/preview")
async def preview_split(request: PreviewRequest):
    """Price a manually adjusted split (remaining budget goes to the LMSR venue)"""
    try:
        result = split_router.preview(
            budget=request.budget,
            order_book_allocation=request.order_book_allocation,
            order_book_stats=request.order_book_stats,
            lmsr_stats=request.lmsr_stats,
            outcome=request.outcome,
        )
    except SplitRouterError as e:
        _raise_http(e)
    return result.to_dict()


@router.get("/actions")
async def list_actions():
    """Describe the actions the betting agent may call"""
    return [action.describe() for action in available_actions.values()]


@router.post("/actions/{action_name}")
async def run_action(action_name: str, parameters: dict[str, Any]):
    """Execute an agent action; failures are reported in the result body"""
    if action_name not in available_actions:
        raise HTTPException(status_code=404, detail=f"Action '{action_name}' not found")
    return execute_action(action_name, parameters).to_dict()
