"""Idea Validator orchestrator: market → roadmap → sprint plan.

Runs the three stages strictly in sequence against the ORIGINAL idea text,
persisting each stage's result the moment it is available. A failed stage
leaves its field unset and the run continues, unless the stage is listed in
`OrchestratorSettings.abort_on_failure`.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import List, Optional

from ...config import env_int, env_list
from ...constants import STAGE_FIELDS, STAGE_MARKET, STAGE_ROADMAP, STAGE_SPRINT, STAGES
from ...errors import CompletionFailure, InvalidInput, PersistenceFailure, SchemaViolation, StageAborted
from ...schemas.report_schema import FeatureRoadmap, MarketSnapshot, SprintEntry
from ...services.idea_service import IdeaRecordStore
from .parser import StageOutput, dump_stage_output, parse_stage_output
from .prompts import STAGE_PROMPTS, build_user_message

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OrchestratorSettings:
    # Extra attempts after a CompletionFailure (0 = no retry)
    completion_retries: int = 1
    abort_on_failure: frozenset = frozenset()

    @classmethod
    def from_env(cls) -> "OrchestratorSettings":
        stages = env_list("VALIDATION_ABORT_ON_FAILURE")
        unknown = [s for s in stages if s not in STAGES]
        if unknown:
            raise ValueError(f"VALIDATION_ABORT_ON_FAILURE has unknown stages: {unknown}")
        return cls(
            completion_retries=max(0, env_int("VALIDATION_COMPLETION_RETRIES", 1)),
            abort_on_failure=frozenset(stages),
        )


@dataclass
class StageError:
    stage: str
    error: str  # completion_failure | schema_violation | persistence_failure
    detail: str


@dataclass
class ValidationOutcome:
    """What was persisted for one validation run. None = stage not stored."""

    record_id: str
    idea: str
    worklab: Optional[str] = None
    market_snapshot: Optional[MarketSnapshot] = None
    feature_roadmap: Optional[FeatureRoadmap] = None
    agile_sprint_plan: Optional[List[SprintEntry]] = None
    stage_errors: List[StageError] = field(default_factory=list)

    def set_stage_output(self, stage: str, output: StageOutput) -> None:
        if stage == STAGE_MARKET:
            self.market_snapshot = output
        elif stage == STAGE_ROADMAP:
            self.feature_roadmap = output
        elif stage == STAGE_SPRINT:
            self.agile_sprint_plan = output


class IdeaValidationOrchestrator:
    def __init__(
        self,
        client,
        store: IdeaRecordStore,
        settings: Optional[OrchestratorSettings] = None,
    ):
        self.client = client
        self.store = store
        self.settings = settings or OrchestratorSettings()

    async def validate_idea(self, idea: str, worklab: Optional[str] = None) -> ValidationOutcome:
        """Create a record for `idea`, then run and persist each stage in order.

        Raises
        ------
        InvalidInput
            If `idea` is missing or blank (nothing is persisted).
        PersistenceFailure
            If the initial record cannot be created.
        StageAborted
            If a stage listed in `abort_on_failure` fails.
        """
        if not isinstance(idea, str) or not idea.strip():
            raise InvalidInput("Idea text must be a non-empty string")

        record_id = self.store.create_record(idea, worklab)
        outcome = ValidationOutcome(record_id=record_id, idea=idea, worklab=worklab)
        logger.info("[VALIDATOR] Started record_id=%s", record_id)

        start_time = time.perf_counter()
        for stage in STAGES:
            await self._run_stage(stage, outcome)

        duration = (time.perf_counter() - start_time) * 1000
        logger.info(
            "[VALIDATOR] Finished record_id=%s in %.0fms (failed stages: %s)",
            record_id,
            duration,
            [e.stage for e in outcome.stage_errors] or "none",
        )
        return outcome

    async def _run_stage(self, stage: str, outcome: ValidationOutcome) -> None:
        try:
            raw = await self._complete_with_retry(stage, outcome.idea)
            output = parse_stage_output(stage, raw)
        except (CompletionFailure, SchemaViolation) as exc:
            kind = "completion_failure" if isinstance(exc, CompletionFailure) else "schema_violation"
            logger.error(
                "[VALIDATOR] stage=%s record_id=%s %s: %s", stage, outcome.record_id, kind, exc.message
            )
            outcome.stage_errors.append(StageError(stage=stage, error=kind, detail=exc.message))
            if stage in self.settings.abort_on_failure:
                raise StageAborted(stage, outcome, exc) from exc
            return

        field_name = STAGE_FIELDS[stage]
        try:
            self.store.update_field(outcome.record_id, field_name, dump_stage_output(output))
        except PersistenceFailure as exc:
            logger.error(
                "[VALIDATOR] stage=%s record_id=%s persistence_failure: %s", stage, outcome.record_id, exc
            )
            outcome.stage_errors.append(
                StageError(stage=stage, error="persistence_failure", detail=str(exc))
            )
            return

        outcome.set_stage_output(stage, output)
        logger.info("[VALIDATOR] stage=%s record_id=%s stored %s", stage, outcome.record_id, field_name)

    async def _complete_with_retry(self, stage: str, idea: str) -> str:
        system_prompt = STAGE_PROMPTS[stage]
        user_message = build_user_message(stage, idea)
        attempts = self.settings.completion_retries + 1

        for attempt in range(attempts):
            try:
                return await self.client.complete(system_prompt, user_message, stage=stage)
            except CompletionFailure as exc:
                if attempt + 1 >= attempts:
                    raise
                logger.warning(
                    "[VALIDATOR] stage=%s attempt %d/%d failed, retrying: %s",
                    stage,
                    attempt + 1,
                    attempts,
                    exc.message,
                )
        raise CompletionFailure(stage, "No completion attempts made")
