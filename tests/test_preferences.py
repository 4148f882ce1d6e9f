import asyncio

from conftest import FakeLLM

from trip_agent.agent.preferences import (
    HeuristicPreferenceExtractor,
    LLMPreferenceExtractor,
    PreferenceManager,
)
from trip_agent.models import UserPreferences


def test_initial_preferences_are_unset():
    prefs = PreferenceManager().get_initial_preferences()

    assert prefs.city == ""
    assert prefs.trip_days == 0
    assert prefs.interests == []
    assert prefs.confirmed is False


def test_missing_fields_in_priority_order():
    manager = PreferenceManager()
    prefs = UserPreferences(city="Jaipur")

    assert manager.get_missing_fields(prefs) == ["trip_days", "daily_time_window", "interests"]


def test_next_question_targets_first_missing_field():
    manager = PreferenceManager()

    assert "city" in manager.get_next_question(UserPreferences()).lower()
    assert "days" in manager.get_next_question(UserPreferences(city="Jaipur")).lower()


def test_next_question_asks_for_confirmation_when_complete(complete_preferences):
    manager = PreferenceManager()
    prefs = complete_preferences.model_copy(update={"confirmed": False})

    question = manager.get_next_question(prefs)

    assert "Bangalore" in question
    assert "generate" in question.lower()


def test_heuristic_extraction_covers_core_fields():
    manager = PreferenceManager()

    prefs = asyncio.run(manager.update_preferences(
        manager.get_initial_preferences(),
        "I want to visit Bangalore for 3 days, 9am to midnight, love food and nightlife",
    ))

    assert prefs.city == "Bangalore"
    assert prefs.trip_days == 3
    assert prefs.daily_time_window == "09:00-00:00"
    assert prefs.interests == ["food", "nightlife"]


def test_heuristic_understands_word_counts_and_constraints():
    extractor = HeuristicPreferenceExtractor()

    result = asyncio.run(extractor.extract(
        UserPreferences(),
        "A relaxed two day trip to Mysore, indoor stuff only, max 30 minutes of travel",
    ))

    assert result["city"] == "Mysore"
    assert result["trip_days"] == 2
    assert result["pace"] == "relaxed"
    assert result["constraints"] == {"indoor_preference": True, "max_travel_time_min": 30}


def test_fast_food_is_not_a_pace():
    result = asyncio.run(HeuristicPreferenceExtractor().extract(UserPreferences(), "I like fast food"))

    assert "pace" not in result
    assert result["interests"] == ["food"]


def test_interests_accumulate_and_other_fields_survive():
    manager = PreferenceManager()
    current = UserPreferences(city="Delhi", trip_days=2, interests=["history"])

    prefs = asyncio.run(manager.update_preferences(current, "also temples please"))

    assert prefs.city == "Delhi"
    assert prefs.trip_days == 2
    assert prefs.interests == ["history", "temples"]


def test_llm_extraction_merges_reply():
    llm = FakeLLM('Sure! {"city": "paris", "trip_days": 4, "daily_time_window": "10 am to 8 pm", "interests": ["Art"]}')
    manager = PreferenceManager(extractor=LLMPreferenceExtractor(llm))

    prefs = asyncio.run(manager.update_preferences(
        UserPreferences(interests=["food"]), "Paris for 4 days, art, 10 to 8",
    ))

    assert prefs.city == "Paris"
    assert prefs.trip_days == 4
    assert prefs.daily_time_window == "10:00-20:00"
    assert prefs.interests == ["food", "art"]
    assert len(llm.prompts) == 1


def test_unparseable_llm_reply_falls_back_to_heuristics():
    llm = FakeLLM("I am not able to help with that.")
    manager = PreferenceManager(extractor=LLMPreferenceExtractor(llm))

    prefs = asyncio.run(manager.update_preferences(UserPreferences(), "Trip to Goa for 5 days"))

    assert prefs.city == "Goa"
    assert prefs.trip_days == 5


def test_llm_error_falls_back_to_heuristics():
    llm = FakeLLM(error=ConnectionError("groq unavailable"))
    manager = PreferenceManager(extractor=LLMPreferenceExtractor(llm))

    prefs = asyncio.run(manager.update_preferences(UserPreferences(), "Mumbai, shopping"))

    assert prefs.city == "Mumbai"
    assert prefs.interests == ["shopping"]


def test_invalid_llm_values_fall_back_to_heuristics():
    llm = FakeLLM('{"trip_days": -3}')
    manager = PreferenceManager(extractor=LLMPreferenceExtractor(llm))

    prefs = asyncio.run(manager.update_preferences(UserPreferences(), "3 days in Chennai"))

    assert prefs.trip_days == 3
    assert prefs.city == "Chennai"


def test_city_phrase_only_fills_an_empty_city(complete_preferences):
    manager = PreferenceManager()

    fresh = asyncio.run(manager.update_preferences(UserPreferences(), "We are headed to Hampi"))
    kept = asyncio.run(manager.update_preferences(complete_preferences, "I want to visit Cubbon Park"))
    moved = asyncio.run(manager.update_preferences(complete_preferences, "Actually let's do Mumbai instead"))

    assert fresh.city == "Hampi"
    assert kept.city == "Bangalore"
    assert moved.city == "Mumbai"


def test_group_size_is_not_a_time_window():
    manager = PreferenceManager()

    prefs = asyncio.run(manager.update_preferences(
        manager.get_initial_preferences(), "Trip to Goa for 3 days with 2-3 friends",
    ))

    assert prefs.city == "Goa"
    assert prefs.trip_days == 3
    assert prefs.daily_time_window == ""
