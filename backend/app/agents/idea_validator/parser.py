"""Stage output parsing: sanitize, decode, and validate against the schema.

Nothing untyped leaves this module: each stage yields a Pydantic model or a
`SchemaViolation`.
"""

from __future__ import annotations

import json
import logging
from typing import List, Union

from pydantic import BaseModel, ValidationError

from ...constants import SPRINT_COUNT, STAGE_MARKET, STAGE_ROADMAP, STAGE_SPRINT
from ...errors import SchemaViolation
from ...schemas.report_schema import FeatureRoadmap, MarketSnapshot, SprintEntry, SprintPlan
from ...services.response_sanitizer import sanitize_json

logger = logging.getLogger(__name__)

StageOutput = Union[MarketSnapshot, FeatureRoadmap, List[SprintEntry]]

_STAGE_MODELS: dict[str, type[BaseModel]] = {
    STAGE_MARKET: MarketSnapshot,
    STAGE_ROADMAP: FeatureRoadmap,
    STAGE_SPRINT: SprintPlan,
}


def _format_errors(exc: ValidationError) -> str:
    parts = []
    for err in exc.errors()[:5]:
        loc = ".".join(str(p) for p in err.get("loc", ())) or "<root>"
        parts.append(f"{loc}: {err.get('msg', 'invalid')}")
    return "; ".join(parts)


def parse_stage_output(stage: str, raw: str) -> StageOutput:
    """Turn a raw completion into the stage's typed result.

    The sprint stage returns the ordered list of sprints; it accepts both
    ``{"agileSprintPlan": [...]}`` and a bare top-level array.
    """
    model = _STAGE_MODELS.get(stage)
    if model is None:
        raise ValueError(f"Unknown stage: {stage}")

    sanitized = sanitize_json(raw)
    try:
        parsed = json.loads(sanitized)
    except ValueError as exc:
        logger.warning("[PARSER] stage=%s JSON parse failed: %s | raw[:300]=%r", stage, exc, raw[:300])
        raise SchemaViolation(stage, f"Response is not valid JSON: {exc}") from exc

    if stage == STAGE_SPRINT and isinstance(parsed, list):
        parsed = {"agileSprintPlan": parsed}

    if not isinstance(parsed, dict):
        raise SchemaViolation(stage, f"Expected a JSON object, got {type(parsed).__name__}")

    try:
        result = model.model_validate(parsed)
    except ValidationError as exc:
        detail = _format_errors(exc)
        logger.warning("[PARSER] stage=%s schema violation: %s", stage, detail)
        raise SchemaViolation(stage, f"Schema contract violated: {detail}") from exc

    if isinstance(result, SprintPlan):
        sprints = result.agile_sprint_plan
        if len(sprints) != SPRINT_COUNT:
            logger.warning(
                "[PARSER] stage=%s expected %d sprints, got %d", stage, SPRINT_COUNT, len(sprints)
            )
        return sprints

    return result


def dump_stage_output(output: StageOutput):
    """Serialize a stage result to its wire (camelCase) JSON shape."""
    if isinstance(output, list):
        return [entry.model_dump(by_alias=True) for entry in output]
    return output.model_dump(by_alias=True)
