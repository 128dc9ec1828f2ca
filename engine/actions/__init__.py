"""Play-phase actions.

Each action validates fully before it changes anything and consumes one
committed captain of its kind on success.
"""

from .base import ActionResult, BaseAction, ValidationResult
from .sail import SailAction, SailMove, check_moves, enumerate_sail_moves, plan_sail_move
from .build import BuildAction, enumerate_builds
from .steal import StealAction, enumerate_steals
from .sink import (
    SinkAction,
    SinkTarget,
    additional_sink_cost,
    enumerate_sinks,
    relocation_cost,
    sink_cost,
    sink_reward,
)
from .chart import (
    DrawChartsAction,
    KeepChartsAction,
    enumerate_chart_draws,
    enumerate_chart_keeps,
)
from .forfeit import ForfeitAction

__all__ = [
    # Base
    "ActionResult",
    "BaseAction",
    "ValidationResult",
    # Sail
    "SailAction",
    "SailMove",
    "check_moves",
    "enumerate_sail_moves",
    "plan_sail_move",
    # Build
    "BuildAction",
    "enumerate_builds",
    # Steal
    "StealAction",
    "enumerate_steals",
    # Sink
    "SinkAction",
    "SinkTarget",
    "additional_sink_cost",
    "enumerate_sinks",
    "relocation_cost",
    "sink_cost",
    "sink_reward",
    # Chart
    "DrawChartsAction",
    "KeepChartsAction",
    "enumerate_chart_draws",
    "enumerate_chart_keeps",
    # Forfeit
    "ForfeitAction",
]
