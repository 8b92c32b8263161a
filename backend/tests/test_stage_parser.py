"""Stage parser tests: schema completeness and SchemaViolation reporting."""

import os
import sys

# Ensure the backend package is importable
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import copy
import json

import pytest

from app.agents.idea_validator.parser import dump_stage_output, parse_stage_output
from app.errors import SchemaViolation
from app.schemas.report_schema import FeatureRoadmap, MarketSnapshot
from fakes import MARKET_PAYLOAD, ROADMAP_PAYLOAD, SPRINT_PAYLOAD, fenced, make_sprint


def _raw(payload):
    return json.dumps(payload)


class TestMarketStage:
    def test_valid_snapshot(self):
        result = parse_stage_output("market", fenced(MARKET_PAYLOAD))
        assert isinstance(result, MarketSnapshot)
        assert result.total_addressable_market.startswith("$150B")
        assert len(result.trends) == 3
        assert result.customer_segments[0].pain_points
        assert dump_stage_output(result) == MARKET_PAYLOAD

    @pytest.mark.parametrize(
        "mutate",
        [
            lambda p: p.update(totalAddressableMarket=""),
            lambda p: p.update(totalAddressableMarket="   "),
            lambda p: p.update(trends=[]),
            lambda p: p.update(trends=["ok", ""]),
            lambda p: p.update(customerSegments=[]),
            lambda p: p["customerSegments"][0].update(painPoints=[]),
            lambda p: p["customerSegments"][0].update(segment=None),
            lambda p: p.pop("trends"),
        ],
    )
    def test_empty_or_missing_fields_rejected(self, mutate):
        payload = copy.deepcopy(MARKET_PAYLOAD)
        mutate(payload)
        with pytest.raises(SchemaViolation) as exc_info:
            parse_stage_output("market", _raw(payload))
        assert exc_info.value.stage == "market"

    def test_padded_strings_kept_verbatim(self):
        payload = copy.deepcopy(MARKET_PAYLOAD)
        payload["trends"][0] = "  padded trend  "
        payload["customerSegments"][0]["segment"] = "\tSMB restaurants\n"

        result = parse_stage_output("market", _raw(payload))

        assert result.trends[0] == "  padded trend  "
        assert dump_stage_output(result) == payload

    def test_array_is_not_a_snapshot(self):
        with pytest.raises(SchemaViolation, match="Expected a JSON object"):
            parse_stage_output("market", "[1, 2, 3]")


class TestRoadmapStage:
    def test_valid_roadmap(self):
        result = parse_stage_output("roadmap", _raw(ROADMAP_PAYLOAD))
        assert isinstance(result, FeatureRoadmap)
        assert [v.version for v in result.versioned_features] == ["v1.1", "v2.0"]
        assert dump_stage_output(result) == ROADMAP_PAYLOAD

    @pytest.mark.parametrize(
        "mutate",
        [
            lambda p: p.update(mvpFeatures=[]),
            lambda p: p.update(stretchGoals=[]),
            lambda p: p.update(versionedFeatures=[]),
            lambda p: p["versionedFeatures"][0].update(features=[]),
            lambda p: p["versionedFeatures"][1].update(version=""),
        ],
    )
    def test_empty_fields_rejected(self, mutate):
        payload = copy.deepcopy(ROADMAP_PAYLOAD)
        mutate(payload)
        with pytest.raises(SchemaViolation):
            parse_stage_output("roadmap", _raw(payload))


class TestSprintStage:
    def test_wrapped_plan_returns_ordered_sprints(self):
        sprints = parse_stage_output("sprint", fenced(SPRINT_PAYLOAD))
        assert [s.sprint for s in sprints] == [f"Sprint {n}" for n in range(1, 8)]
        assert dump_stage_output(sprints) == SPRINT_PAYLOAD["agileSprintPlan"]

    def test_bare_array_accepted(self):
        sprints = parse_stage_output("sprint", _raw([make_sprint(1), make_sprint(2)]))
        assert len(sprints) == 2

    def test_priority_case_normalized(self):
        sprint = make_sprint(1)
        sprint["userStories"][0]["priority"] = "high"
        sprints = parse_stage_output("sprint", _raw([sprint]))
        assert sprints[0].user_stories[0].priority == "High"

    def test_unknown_priority_rejected(self):
        sprint = make_sprint(1)
        sprint["userStories"][0]["priority"] = "Urgent"
        with pytest.raises(SchemaViolation):
            parse_stage_output("sprint", _raw([sprint]))

    def test_numeric_rice_values_become_text(self):
        sprint = make_sprint(1)
        sprint["riceEstimate"] = {"reach": 500, "impact": 2, "confidence": 0.8, "effort": 3}
        sprints = parse_stage_output("sprint", _raw([sprint]))
        assert sprints[0].rice_estimate.confidence == "0.8"

    @pytest.mark.parametrize(
        "mutate",
        [
            lambda s: s.update(userStories=[]),
            lambda s: s["userStories"][0].update(story=""),
            lambda s: s.pop("riceEstimate"),
            lambda s: s["riceEstimate"].update(effort=""),
        ],
    )
    def test_incomplete_sprint_rejected(self, mutate):
        sprint = make_sprint(1)
        mutate(sprint)
        with pytest.raises(SchemaViolation):
            parse_stage_output("sprint", _raw({"agileSprintPlan": [sprint]}))

    def test_empty_plan_rejected(self):
        with pytest.raises(SchemaViolation):
            parse_stage_output("sprint", _raw({"agileSprintPlan": []}))


class TestParseFailures:
    def test_unparseable_text_is_schema_violation(self):
        with pytest.raises(SchemaViolation) as exc_info:
            parse_stage_output("roadmap", "Sorry, I cannot help with that.")
        assert exc_info.value.stage == "roadmap"
        assert "not valid JSON" in exc_info.value.message

    def test_commented_json_is_repaired(self):
        raw = "```json\n" + json.dumps(ROADMAP_PAYLOAD)[:-1] + ", // done\n}\n```"
        result = parse_stage_output("roadmap", raw)
        assert result.stretch_goals == ROADMAP_PAYLOAD["stretchGoals"]

    def test_unknown_stage(self):
        with pytest.raises(ValueError):
            parse_stage_output("pricing", "{}")
