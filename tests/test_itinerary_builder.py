import asyncio
import json

import pytest
from conftest import FakeLLM

from trip_agent.errors import ToolExecutionError, ToolOutputViolation
from trip_agent.mcp_servers.itinerary import ItineraryBuilderTool, plan_itinerary, sanitize_days
from trip_agent.mcp_servers.registry import ToolName, ToolRegistry
from trip_agent.mcp_servers.schemas import ItineraryBuilderInput
from trip_agent.timewindow import parse_time_window


def _payload(candidates, trip_days=3, pace="moderate", window="09:00-18:00"):
    return ItineraryBuilderInput(
        city="Bangalore",
        pois=candidates,
        interests=["food"],
        daily_time_window=window,
        pace=pace,
        trip_days=trip_days,
    )


@pytest.mark.parametrize("pace,stops", [("relaxed", 2), ("moderate", 3), ("fast", 4)])
def test_planner_sizes_days_by_pace(food_candidates, pace, stops):
    days = plan_itinerary(food_candidates, 3, pace, "09:00-18:00")

    assert [d.day for d in days] == [1, 2, 3]
    assert all(len(d.blocks) == stops for d in days)


def test_planner_never_repeats_a_poi(food_candidates):
    days = plan_itinerary(food_candidates, 4, "fast", "09:00-21:00")

    ids = [b.poi_id for d in days for b in d.blocks]
    assert len(ids) == len(set(ids)) == 14


def test_planner_durations_fit_budget(food_candidates):
    budget = parse_time_window("10:00-14:00")

    for day in plan_itinerary(food_candidates, 2, "fast", "10:00-14:00"):
        assert sum(b.duration_min for b in day.blocks) <= budget
        assert all(30 <= b.duration_min <= 120 for b in day.blocks)


def test_planner_opens_each_day_with_best_remaining(food_candidates):
    days = plan_itinerary(food_candidates, 2, "moderate", "09:00-18:00")

    assert days[0].blocks[0].poi_id == "poi_ban_0"
    first_day = {b.poi_id for b in days[0].blocks}
    best_left = next(c for c in food_candidates if c.poi_id not in first_day)
    assert days[1].blocks[0].poi_id == best_left.poi_id


def test_sanitize_drops_invented_and_duplicate_pois(food_candidates):
    raw = [
        {"day": 1, "blocks": [
            {"time_of_day": "Morning", "poi_id": "poi_ban_0", "duration_min": 60},
            {"time_of_day": "Afternoon", "poi_id": "poi_fake_9", "duration_min": 60},
        ]},
        {"day": 5, "blocks": [
            {"time_of_day": "Morning", "poi_id": "poi_ban_0", "duration_min": 60},
            {"time_of_day": "Evening", "poi_id": "poi_ban_1", "duration_min": 90, "travel_time_min": 45},
        ]},
        {"day": 3, "blocks": [{"time_of_day": "Morning", "poi_id": "poi_ban_2", "duration_min": 60}]},
    ]

    days = sanitize_days(raw, food_candidates, trip_days=2)

    assert [d["day"] for d in days] == [1, 2]
    assert [b["poi_id"] for b in days[0]["blocks"]] == ["poi_ban_0"]
    assert [b["poi_id"] for b in days[1]["blocks"]] == ["poi_ban_1"]
    assert days[1]["blocks"][0]["travel_time_min"] == 0
    assert days[1]["blocks"][0]["poi_name"] == food_candidates[1].name


def test_llm_reply_is_sanitized_through_the_gateway(food_candidates):
    reply = json.dumps({"days": [
        {"day": 1, "blocks": [
            {"time_of_day": "Morning", "poi_id": "poi_ban_3", "duration_min": 90},
            {"time_of_day": "Evening", "poi_id": "poi_ban_3", "duration_min": 90},
        ]},
    ]})
    llm = FakeLLM(f"Here is the plan:\n{reply}")
    registry = ToolRegistry()
    registry.register(ItineraryBuilderTool(llm=llm))

    result = asyncio.run(registry.invoke(ToolName.ITINERARY_BUILDER, _payload(food_candidates, trip_days=1)))

    assert len(result.days) == 1
    assert [b.poi_id for b in result.days[0].blocks] == ["poi_ban_3"]
    assert "poi_ban_0" in llm.prompts[0]


def test_unparseable_llm_reply_uses_planner(food_candidates):
    tool = ItineraryBuilderTool(llm=FakeLLM("no json here"))

    result = asyncio.run(tool.execute(_payload(food_candidates)))

    assert len(result["days"]) == 3
    assert all(len(d["blocks"]) == 3 for d in result["days"])


def test_llm_failure_is_an_execution_error(food_candidates):
    registry = ToolRegistry()
    registry.register(ItineraryBuilderTool(llm=FakeLLM(error=TimeoutError("slow"))))

    with pytest.raises(ToolExecutionError):
        asyncio.run(registry.invoke(ToolName.ITINERARY_BUILDER, _payload(food_candidates)))


def test_sanitize_skips_entries_that_are_not_objects(food_candidates):
    raw = [
        "day one",
        {"day": 1, "blocks": ["poi_ban_0", {"time_of_day": "Morning", "poi_id": "poi_ban_1", "duration_min": 60}]},
        {"day": 2, "blocks": "poi_ban_2"},
    ]

    days = sanitize_days(raw, food_candidates, trip_days=2)

    assert [[b["poi_id"] for b in d["blocks"]] for d in days] == [["poi_ban_1"], []]


@pytest.mark.parametrize("reply", ['{"days": "tomorrow"}', '{"plan": []}'])
def test_malformed_days_violate_the_output_contract(food_candidates, reply):
    registry = ToolRegistry()
    registry.register(ItineraryBuilderTool(llm=FakeLLM(reply)))

    with pytest.raises(ToolOutputViolation):
        asyncio.run(registry.invoke(ToolName.ITINERARY_BUILDER, _payload(food_candidates)))
