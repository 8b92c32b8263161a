# Schemas package
from .idea_schema import IdeaRecordResponse, StageErrorResponse, ValidateIdeaInput
from .report_schema import (
    CustomerSegment,
    FeatureRoadmap,
    MarketSnapshot,
    RiceEstimate,
    SprintEntry,
    SprintPlan,
    UserStory,
    VersionStage,
)

__all__ = [
    "ValidateIdeaInput",
    "IdeaRecordResponse",
    "StageErrorResponse",
    "MarketSnapshot",
    "CustomerSegment",
    "FeatureRoadmap",
    "VersionStage",
    "SprintPlan",
    "SprintEntry",
    "UserStory",
    "RiceEstimate",
]
