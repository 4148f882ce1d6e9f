"""Pytest fixtures for offline agent tests."""

import os
from typing import Any, Dict, List

import pytest

# No network-backed collaborators and no log file during tests.
os.environ["GROQ_API_KEY"] = ""
os.environ["RESEND_API_KEY"] = ""
os.environ["LOG_FILE"] = ""

from trip_agent.mcp_servers.itinerary import ItineraryBuilderTool  # noqa: E402
from trip_agent.mcp_servers.registry import Tool, ToolName, ToolRegistry  # noqa: E402
from trip_agent.mcp_servers.schemas import PoiSearchInput, PoiSearchOutput  # noqa: E402
from trip_agent.mcp_servers.travel_time import TravelTimeTool  # noqa: E402
from trip_agent.mcp_servers.weather import WeatherTool  # noqa: E402
from trip_agent.models import (  # noqa: E402
    Itinerary,
    ItineraryBlock,
    ItineraryDay,
    Location,
    POICandidate,
    UserPreferences,
)

BANGALORE = (12.9716, 77.5946)

FOOD_PLACES = [
    "VV Puram Food Street",
    "Mavalli Tiffin Rooms",
    "Vidyarthi Bhavan",
    "Koshy's",
    "Brahmin's Coffee Bar",
    "CTR Malleshwaram",
    "Russell Market",
    "Commercial Street Eats",
    "Church Street Social",
    "Toit Brewpub",
    "Shivaji Military Hotel",
    "Nagarjuna Residency",
    "Karavalli",
    "Empire Restaurant",
]


class FakeMessage:
    def __init__(self, content: str):
        self.content = content


class FakeLLM:
    """Stands in for ChatGroq: replays canned replies and records prompts."""

    def __init__(self, *replies: str, error: Exception = None):
        self.replies = list(replies)
        self.error = error
        self.prompts: List[str] = []

    async def ainvoke(self, messages):
        self.prompts.append(messages[-1].content)
        if self.error:
            raise self.error
        return FakeMessage(self.replies.pop(0) if self.replies else "")


class StubSearchTool(Tool):
    """Search tool returning a fixed candidate list."""

    name = ToolName.POI_SEARCH
    description = "Returns canned candidates."
    input_model = PoiSearchInput
    output_model = PoiSearchOutput

    def __init__(self, candidates: List[POICandidate]):
        self.candidates = candidates
        self.calls = 0

    async def execute(self, payload: PoiSearchInput) -> Dict[str, Any]:
        self.calls += 1
        return {"candidates": [c.model_dump() for c in self.candidates]}


def make_candidates(names: List[str], types: List[str]) -> List[POICandidate]:
    lat, lng = BANGALORE
    return [
        POICandidate(
            poi_id=f"poi_ban_{i}",
            score=round(0.95 - i * 0.02, 3),
            name=name,
            description=f"{name} is a well known spot in Bangalore.",
            location=Location(lat=lat + (i % 4) * 0.004, lng=lng + (i // 4) * 0.004),
            opening_hours="10:00 - 18:00",
            types=types,
        )
        for i, name in enumerate(names)
    ]


def make_itinerary(days: List[List[str]], duration: int = 60, travel: int = 0) -> Itinerary:
    return Itinerary(days=[
        ItineraryDay(
            day=n,
            blocks=[
                ItineraryBlock(
                    time_of_day="Morning",
                    poi_id=poi_id,
                    duration_min=duration,
                    travel_time_min=0 if i == 0 else travel,
                )
                for i, poi_id in enumerate(ids)
            ],
        )
        for n, ids in enumerate(days, start=1)
    ])


@pytest.fixture
def food_candidates() -> List[POICandidate]:
    return make_candidates(FOOD_PLACES, ["food"])


@pytest.fixture
def complete_preferences() -> UserPreferences:
    return UserPreferences(
        city="Bangalore",
        trip_days=3,
        daily_time_window="09:00-18:00",
        pace="moderate",
        interests=["food"],
        confirmed=True,
    )


@pytest.fixture
def stub_search(food_candidates) -> StubSearchTool:
    return StubSearchTool(food_candidates)


@pytest.fixture
def registry(stub_search) -> ToolRegistry:
    """Registry with canned search and the real offline tools."""
    reg = ToolRegistry()
    reg.register(stub_search)
    reg.register(ItineraryBuilderTool())
    reg.register(TravelTimeTool())
    reg.register(WeatherTool())
    return reg
