from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .report_schema import FeatureRoadmap, MarketSnapshot, SprintEntry


class ValidateIdeaInput(BaseModel):
    """Request body for POST /api/validate-idea.

    Blank ideas are rejected by the orchestrator (InvalidInput -> 400), not
    here, so the rejection happens before any record is created.
    """

    idea: str = Field(
        ...,
        max_length=5000,
        description="Free-text business idea to validate.",
        examples=["AI-powered food delivery optimization platform"],
    )
    worklab: Optional[str] = Field(
        default=None,
        max_length=255,
        description="Optional caller-supplied workspace tag.",
    )


class StageErrorResponse(BaseModel):
    stage: str
    error: str
    detail: str


class IdeaRecordResponse(BaseModel):
    """Mirror of a persisted IdeaRecord. Null stage fields mean the stage did not persist."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., alias="_id")
    idea: str
    worklab: Optional[str] = None
    market_snapshot: Optional[MarketSnapshot] = Field(default=None, alias="marketSnapshot")
    feature_roadmap: Optional[FeatureRoadmap] = Field(default=None, alias="featureRoadmap")
    agile_sprint_plan: Optional[List[SprintEntry]] = Field(default=None, alias="agileSprintPlan")
    stage_errors: List[StageErrorResponse] = Field(default_factory=list, alias="stageErrors")
