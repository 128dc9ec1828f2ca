"""Game engine for the Notorious board game.

This module provides the game logic including:
- Play-phase actions (sail, build, steal, sink, chart, forfeit)
- Chart claiming and pirate phase scoring
- Phase state machine for game flow control
- Game engine for coordinating game play
"""

from .actions import (
    ActionResult,
    BaseAction,
    ValidationResult,
    SailAction,
    SailMove,
    BuildAction,
    StealAction,
    SinkAction,
    SinkTarget,
    DrawChartsAction,
    KeepChartsAction,
    ForfeitAction,
)

from .claims import ChartClaimResolver, ClaimResult

from .pirate import PirateReport, begin_pirate_phase

from .phase_machine import (
    PhaseMachine,
    PhaseTransitionResult,
    PHASE_TRANSITIONS,
)

from .setup import SetupManager

from .game_engine import (
    GameEngine,
    Action,
    ActionType,
    StepResult,
)

from .observation import ObservationConfig, ObservationEncoder

__all__ = [
    # Actions
    "ActionResult",
    "BaseAction",
    "ValidationResult",
    "SailAction",
    "SailMove",
    "BuildAction",
    "StealAction",
    "SinkAction",
    "SinkTarget",
    "DrawChartsAction",
    "KeepChartsAction",
    "ForfeitAction",
    # Claims and scoring
    "ChartClaimResolver",
    "ClaimResult",
    "PirateReport",
    "begin_pirate_phase",
    # Phase machine
    "PhaseMachine",
    "PhaseTransitionResult",
    "PHASE_TRANSITIONS",
    # Setup
    "SetupManager",
    # Game engine
    "GameEngine",
    "Action",
    "ActionType",
    "StepResult",
    # Observation
    "ObservationConfig",
    "ObservationEncoder",
]
