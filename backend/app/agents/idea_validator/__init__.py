from .orchestrator import (
    IdeaValidationOrchestrator,
    OrchestratorSettings,
    StageError,
    ValidationOutcome,
)
from .parser import parse_stage_output
from .prompts import STAGE_PROMPTS, build_user_message

__all__ = [
    "IdeaValidationOrchestrator",
    "OrchestratorSettings",
    "StageError",
    "ValidationOutcome",
    "parse_stage_output",
    "STAGE_PROMPTS",
    "build_user_message",
]
