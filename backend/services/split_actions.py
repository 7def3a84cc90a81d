"""
Agent-callable actions over the split router.

The betting agent emits named actions with loosely typed parameters. Each
action declares its parameters so required ones can be checked before the
handler runs, and every execution is wrapped in an ``ActionResult`` so a
failure is reported back to the agent instead of aborting the conversation.
"""

import time
from dataclasses import dataclass
from typing import Any, Callable, Optional

from services.optimization import SplitRouterError
from services.split_router import SplitRouter, split_router
from utils.logger import get_logger

logger = get_logger("split_actions")


@dataclass
class ActionParameter:
    type: str
    description: str
    required: bool = False


@dataclass
class AvailableAction:
    name: str
    description: str
    parameters: dict[str, ActionParameter]
    handler: Callable[[dict[str, Any]], dict]

    def describe(self) -> dict:
        return {
            "name": self.name,
            "description": self.description,
            "parameters": {
                key: {
                    "type": param.type,
                    "description": param.description,
                    "required": param.required,
                }
                for key, param in self.parameters.items()
            },
        }


@dataclass
class ActionResult:
    action_name: str
    success: bool
    result: Optional[dict] = None
    error: Optional[str] = None
    execution_time_ms: float = 0.0

    def to_dict(self) -> dict:
        return {
            "action_name": self.action_name,
            "success": self.success,
            "result": self.result,
            "error": self.error,
            "execution_time_ms": self.execution_time_ms,
        }


def _optimize_betting_split(params: dict[str, Any], router: SplitRouter) -> dict:
    polymarket_data = params.get("polymarketData")
    omen_data = params.get("omenData")
    result = router.optimize(
        budget=params.get("budget"),
        order_book_stats=polymarket_data,
        lmsr_stats=omen_data,
        outcome=params.get("outcome", "yes"),
    )
    return result.to_dict()


def build_actions(router: SplitRouter = split_router) -> dict[str, AvailableAction]:
    return {
        "optimizeBettingSplit": AvailableAction(
            name="optimizeBettingSplit",
            description=(
                "Calculate optimal betting split between Polymarket (Order Book) "
                "and Omen (LMSR) platforms"
            ),
            parameters={
                "budget": ActionParameter(
                    type="number",
                    description="Total budget to split across platforms",
                    required=True,
                ),
                "polymarketData": ActionParameter(
                    type="object",
                    description=(
                        "Polymarket market statistics (tradesQuantity, buysQuantity, "
                        "sellsQuantity, scaledCollateralVolume, etc.)"
                    ),
                ),
                "omenData": ActionParameter(
                    type="object",
                    description=(
                        "Omen market statistics (tradesQuantity, buysQuantity, "
                        "sellsQuantity, scaledCollateralVolume, etc.)"
                    ),
                ),
                "outcome": ActionParameter(
                    type="string",
                    description="Outcome to buy: yes or no (default yes)",
                ),
            },
            handler=lambda params: _optimize_betting_split(params, router),
        ),
    }


available_actions = build_actions()


def execute_action(
    name: str,
    parameters: Optional[dict[str, Any]] = None,
    actions: Optional[dict[str, AvailableAction]] = None,
) -> ActionResult:
    """Run one named action. Failures are returned, never raised."""
    started = time.perf_counter()
    parameters = parameters or {}
    registry = actions if actions is not None else available_actions

    def elapsed_ms() -> float:
        return round((time.perf_counter() - started) * 1000, 3)

    action = registry.get(name)
    if action is None:
        return ActionResult(
            action_name=name,
            success=False,
            error=f"Action '{name}' not found",
            execution_time_ms=elapsed_ms(),
        )

    for param_name, param in action.parameters.items():
        if param.required and param_name not in parameters:
            return ActionResult(
                action_name=name,
                success=False,
                error=f"Required parameter '{param_name}' is missing",
                execution_time_ms=elapsed_ms(),
            )

    try:
        result = action.handler(parameters)
    except (SplitRouterError, ValueError) as e:
        logger.warning("Action failed", action=name, error=str(e))
        return ActionResult(
            action_name=name,
            success=False,
            error=str(e),
            execution_time_ms=elapsed_ms(),
        )

    logger.info("Action executed", action=name, duration_ms=elapsed_ms())
    return ActionResult(
        action_name=name,
        success=True,
        result=result,
        execution_time_ms=elapsed_ms(),
    )
