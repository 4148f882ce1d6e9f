import asyncio

from conftest import FakeLLM, make_itinerary

from trip_agent.agent.reasoning import ReasoningService, build_poi_context, select_targeted


def _contexts(food_candidates):
    ids = [c.poi_id for c in food_candidates]
    return build_poi_context(make_itinerary([ids[0:2], ids[2:4]]), food_candidates)


def test_context_carries_schedule(food_candidates):
    contexts = _contexts(food_candidates)

    assert [c.name for c in contexts] == ["VV Puram Food Street", "Mavalli Tiffin Rooms", "Vidyarthi Bhavan", "Koshy's"]
    assert contexts[2].scheduled_time == "Day 2 Morning"


def test_targeting_by_name_word(food_candidates):
    contexts = _contexts(food_candidates)

    assert [c.name for c in select_targeted(contexts, "why mavalli?")] == ["Mavalli Tiffin Rooms"]
    assert select_targeted(contexts, "why this plan?") == contexts


def test_llm_justification(food_candidates):
    llm = FakeLLM('{"why": "Legendary dosas.", "timing": "Breakfast slot works."}')
    contexts = _contexts(food_candidates)[:1]

    (result,) = asyncio.run(ReasoningService(llm).justify_pois(contexts, "Bangalore", ["food"], "09:00-18:00"))

    assert result.answer == "**Why:** Legendary dosas.\n**Timing:** Breakfast slot works."
    assert result.citations == ["Wikipedia: VV Puram Food Street"]
    assert "VV Puram Food Street" in llm.prompts[0]


def test_llm_failure_falls_back_to_description(food_candidates):
    llm = FakeLLM(error=RuntimeError("rate limited"))
    contexts = _contexts(food_candidates)[:1]

    (result,) = asyncio.run(ReasoningService(llm).justify_pois(contexts, "Bangalore", ["food"]))

    assert "well known spot in Bangalore" in result.answer
