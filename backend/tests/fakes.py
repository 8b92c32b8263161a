"""Canned stage payloads and a fake completion client shared by the tests."""

import json

MARKET_PAYLOAD = {
    "totalAddressableMarket": "$150B global online food delivery market (2024), driven by urban demand",
    "trends": [
        "Dark kitchens expanding in dense metros",
        "Route optimization with real-time traffic data",
        "Subscription-based free delivery programs",
    ],
    "customerSegments": [
        {
            "segment": "Independent restaurants",
            "painPoints": ["High aggregator commissions", "Unpredictable courier arrival times"],
        },
        {
            "segment": "Fleet operators",
            "painPoints": ["Idle courier time between orders", "Manual dispatching"],
        },
    ],
}

ROADMAP_PAYLOAD = {
    "mvpFeatures": ["Order batching engine", "Courier ETA prediction", "Restaurant dashboard"],
    "versionedFeatures": [
        {"version": "v1.1", "features": ["Dynamic delivery zones", "SMS notifications"]},
        {"version": "v2.0", "features": ["Demand forecasting", "Multi-city support"]},
    ],
    "stretchGoals": ["Drone delivery pilot", "Carbon footprint reporting"],
}


def make_sprint(number):
    return {
        "sprint": f"Sprint {number}",
        "userStories": [
            {"story": f"As a dispatcher, I want batch suggestions for sprint {number}", "priority": "High"},
            {"story": f"As a courier, I want a clear route for sprint {number}", "priority": "Medium"},
        ],
        "riceEstimate": {
            "reach": "500 couriers per quarter",
            "impact": "High",
            "confidence": "80%",
            "effort": "3 person-weeks",
        },
    }


SPRINT_PAYLOAD = {"agileSprintPlan": [make_sprint(n) for n in range(1, 8)]}


def fenced(payload):
    """Wrap a payload the way chat models often answer."""
    return f"Here is the analysis you asked for:\n```json\n{json.dumps(payload, indent=2)}\n```\nLet me know if you need more."


def canned_responses():
    return {
        "market": fenced(MARKET_PAYLOAD),
        "roadmap": fenced(ROADMAP_PAYLOAD),
        "sprint": fenced(SPRINT_PAYLOAD),
    }


class CannedCompletionClient:
    """Stand-in for OpenAICompletionClient.

    `responses` maps stage -> str | Exception | list of those (one per attempt).
    """

    def __init__(self, responses=None):
        self.responses = dict(responses or canned_responses())
        self.calls = []

    async def complete(self, system_prompt, user_message, *, stage="unknown"):
        self.calls.append((stage, system_prompt, user_message))
        response = self.responses[stage]
        if isinstance(response, list):
            response = response.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    def stages_called(self):
        return [call[0] for call in self.calls]
