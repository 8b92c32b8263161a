"""
Validation Router

Handles POST /api/validate-idea (run the three-stage validator) and
GET /api/ideas/{idea_id} (read back a stored record).
"""

import time
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from ..agents.idea_validator import IdeaValidationOrchestrator, OrchestratorSettings, ValidationOutcome
from ..database import get_db
from ..errors import InvalidInput, PersistenceFailure, StageAborted
from ..models.idea import IdeaRecord
from ..schemas.idea_schema import IdeaRecordResponse, StageErrorResponse, ValidateIdeaInput
from ..schemas.report_schema import FeatureRoadmap, MarketSnapshot, SprintEntry
from ..services.idea_service import IdeaRecordStore, load_stage_field
from ..services.openai_client import OpenAICompletionClient, get_completion_client


router = APIRouter(
    prefix="/api",
    tags=["Validation"],
    responses={
        500: {"description": "Internal server error during validation"}
    }
)


def get_orchestrator_settings() -> OrchestratorSettings:
    return OrchestratorSettings.from_env()


def _error(status_code: int, error: str, detail: str, **extra) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "error": error, "detail": detail, **extra},
    )


def _outcome_to_response(outcome: ValidationOutcome) -> IdeaRecordResponse:
    return IdeaRecordResponse(
        id=outcome.record_id,
        idea=outcome.idea,
        worklab=outcome.worklab,
        market_snapshot=outcome.market_snapshot,
        feature_roadmap=outcome.feature_roadmap,
        agile_sprint_plan=outcome.agile_sprint_plan,
        stage_errors=[
            StageErrorResponse(stage=e.stage, error=e.error, detail=e.detail)
            for e in outcome.stage_errors
        ],
    )


def _record_to_response(record: IdeaRecord) -> IdeaRecordResponse:
    market = load_stage_field(record, "marketSnapshot")
    roadmap = load_stage_field(record, "featureRoadmap")
    sprints = load_stage_field(record, "agileSprintPlan")
    return IdeaRecordResponse(
        id=str(record.id),
        idea=record.idea,
        worklab=record.worklab,
        market_snapshot=MarketSnapshot.model_validate(market) if market is not None else None,
        feature_roadmap=FeatureRoadmap.model_validate(roadmap) if roadmap is not None else None,
        agile_sprint_plan=[SprintEntry.model_validate(s) for s in sprints] if sprints is not None else None,
    )


@router.post(
    "/validate-idea",
    response_model=IdeaRecordResponse,
    status_code=status.HTTP_200_OK,
    summary="Validate a Business Idea",
    response_description="The stored idea record with market snapshot, feature roadmap and sprint plan",
)
async def validate_idea(
    request: ValidateIdeaInput,
    db: Session = Depends(get_db),
    client: OpenAICompletionClient = Depends(get_completion_client),
    settings: OrchestratorSettings = Depends(get_orchestrator_settings),
):
    """
    Run the market → roadmap → sprint pipeline for one idea.

    Returns 200 with a partially populated record when some stages fail;
    null fields and `stageErrors` say which ones.
    """
    start_time = time.perf_counter()
    print(f"[TIMING] validate_idea: START")

    orchestrator = IdeaValidationOrchestrator(client, IdeaRecordStore(db), settings)
    try:
        outcome = await orchestrator.validate_idea(request.idea, request.worklab)
    except InvalidInput as exc:
        return _error(status.HTTP_400_BAD_REQUEST, "invalid_input", str(exc))
    except PersistenceFailure as exc:
        return _error(status.HTTP_503_SERVICE_UNAVAILABLE, "persistence_failure", str(exc))
    except StageAborted as exc:
        return _error(
            status.HTTP_502_BAD_GATEWAY,
            "stage_failed",
            str(exc),
            stage=exc.stage,
            recordId=exc.outcome.record_id,
        )

    total_duration = (time.perf_counter() - start_time) * 1000
    print(f"[TIMING] validate_idea: END, duration={total_duration:.0f}ms")

    return _outcome_to_response(outcome)


@router.get(
    "/ideas/{idea_id}",
    response_model=IdeaRecordResponse,
    summary="Get a stored idea record",
)
def get_idea(idea_id: UUID, db: Session = Depends(get_db)) -> IdeaRecordResponse:
    """Retrieve a record by id. Never triggers validation."""
    record: Optional[IdeaRecord] = IdeaRecordStore(db).get_record(str(idea_id))
    if record is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Idea {idea_id} not found",
        )
    return _record_to_response(record)
