"""Orchestrator package -- the tool-call turn-taking state machine.

Provides the Orchestrator class, its configuration and state enum, and the
result type returned by a successful run.
"""

from trusty.orchestrator.config import OrchestratorConfig, TurnState
from trusty.orchestrator.loop import Orchestrator
from trusty.orchestrator.models import OrchestratorResult

__all__ = [
    "Orchestrator",
    "OrchestratorConfig",
    "OrchestratorResult",
    "TurnState",
]
