"""Locked Pydantic schemas for the three stage outputs.

Wire names are camelCase (what the model is told to emit and what the API
returns); Python attributes are snake_case. Every string must be non-blank
and every list must have at least one element.
"""

from __future__ import annotations

from typing import Annotated, List, Literal

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, field_validator


def _require_text(v: str) -> str:
    # Blank values are rejected but the model's text is kept verbatim.
    if not v.strip():
        raise ValueError("must not be blank")
    return v


NonEmptyStr = Annotated[str, AfterValidator(_require_text)]

Priority = Literal["High", "Medium", "Low"]


class _ReportModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


# ── Stage 1: market ──────────────────────────────────────────────────────

class CustomerSegment(_ReportModel):
    segment: NonEmptyStr = Field(..., description="Customer segment name")
    pain_points: List[NonEmptyStr] = Field(..., alias="painPoints", min_length=1)


class MarketSnapshot(_ReportModel):
    total_addressable_market: NonEmptyStr = Field(
        ...,
        alias="totalAddressableMarket",
        description="Size and description of the total addressable market",
    )
    trends: List[NonEmptyStr] = Field(..., min_length=1)
    customer_segments: List[CustomerSegment] = Field(..., alias="customerSegments", min_length=1)


# ── Stage 2: roadmap ─────────────────────────────────────────────────────

class VersionStage(_ReportModel):
    version: NonEmptyStr = Field(..., description="Release label, e.g. 'v1.1'")
    features: List[NonEmptyStr] = Field(..., min_length=1)


class FeatureRoadmap(_ReportModel):
    mvp_features: List[NonEmptyStr] = Field(..., alias="mvpFeatures", min_length=1)
    versioned_features: List[VersionStage] = Field(..., alias="versionedFeatures", min_length=1)
    stretch_goals: List[NonEmptyStr] = Field(..., alias="stretchGoals", min_length=1)


# ── Stage 3: sprint plan ─────────────────────────────────────────────────

class UserStory(_ReportModel):
    story: NonEmptyStr
    priority: Priority

    @field_validator("priority", mode="before")
    @classmethod
    def normalize_priority(cls, v):
        if isinstance(v, str):
            return v.strip().capitalize()
        return v


class RiceEstimate(_ReportModel):
    """RICE magnitudes are free text ("2,000 users/quarter", "3 weeks")."""

    reach: NonEmptyStr
    impact: NonEmptyStr
    confidence: NonEmptyStr
    effort: NonEmptyStr

    @field_validator("reach", "impact", "confidence", "effort", mode="before")
    @classmethod
    def stringify_numbers(cls, v):
        # Models often answer RICE fields with bare numbers.
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        return v


class SprintEntry(_ReportModel):
    sprint: NonEmptyStr = Field(..., description="Sprint label, e.g. 'Sprint 1'")
    user_stories: List[UserStory] = Field(..., alias="userStories", min_length=1)
    rice_estimate: RiceEstimate = Field(..., alias="riceEstimate")


class SprintPlan(_ReportModel):
    agile_sprint_plan: List[SprintEntry] = Field(..., alias="agileSprintPlan", min_length=1)
