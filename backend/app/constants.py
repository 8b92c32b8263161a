"""Centralized constants shared by the validator pipeline and routes.

This module is the SINGLE SOURCE OF TRUTH for stage names, their order,
and the record field each stage writes.
"""

from __future__ import annotations

# ── Stages ──────────────────────────────────────────────────────────────
# Fixed execution order. Stages never feed each other; each one sees only
# the original idea text.

STAGE_MARKET = "market"
STAGE_ROADMAP = "roadmap"
STAGE_SPRINT = "sprint"

STAGES: tuple[str, ...] = (STAGE_MARKET, STAGE_ROADMAP, STAGE_SPRINT)

# Stage -> public IdeaRecord field it populates
STAGE_FIELDS: dict[str, str] = {
    STAGE_MARKET: "marketSnapshot",
    STAGE_ROADMAP: "featureRoadmap",
    STAGE_SPRINT: "agileSprintPlan",
}

# ── Sprint plan ─────────────────────────────────────────────────────────

SPRINT_COUNT = 7
