"""Preference collection: extraction from free text, merging and gap detection."""
import logging
import re
from typing import Any, Dict, List, Optional

from trip_agent.agent.prompt import get_extraction_prompt
from trip_agent.errors import ExtractionError
from trip_agent.llm import complete, extract_json_object
from trip_agent.models import UserPreferences
from trip_agent.timewindow import normalize_time_window

logger = logging.getLogger("preference-manager")

# Priority order for clarifying questions
REQUIRED_FIELDS = ["city", "trip_days", "daily_time_window", "interests"]

QUESTIONS = {
    "city": "Which city are you planning to visit?",
    "trip_days": "How many days is your trip?",
    "daily_time_window": "What are your preferred start and end times each day? (e.g., 9 AM to 6 PM)",
    "interests": "What are your interests? (e.g., temples, gardens, nightlife, shopping)",
}

PACES = ("relaxed", "moderate", "fast")

KNOWN_CITIES = {
    "bangalore": "Bangalore",
    "bengaluru": "Bangalore",
    "mumbai": "Mumbai",
    "new delhi": "New Delhi",
    "delhi": "Delhi",
    "jaipur": "Jaipur",
    "chennai": "Chennai",
    "hyderabad": "Hyderabad",
    "kolkata": "Kolkata",
    "ahmedabad": "Ahmedabad",
    "pune": "Pune",
    "goa": "Goa",
    "mysore": "Mysore",
    "udaipur": "Udaipur",
    "agra": "Agra",
    "varanasi": "Varanasi",
    "kochi": "Kochi",
    "paris": "Paris",
    "london": "London",
    "rome": "Rome",
    "tokyo": "Tokyo",
    "new york": "New York",
    "barcelona": "Barcelona",
    "singapore": "Singapore",
    "dubai": "Dubai",
    "bangkok": "Bangkok",
}

INTEREST_KEYWORDS = {
    "food": ["food", "foodie", "cuisine", "street food", "restaurants?", "eating"],
    "nightlife": ["nightlife", "bars?", "clubs?", "pubs?"],
    "temples": ["temples?"],
    "gardens": ["gardens?"],
    "shopping": ["shopping", "markets?", "malls?"],
    "museums": ["museums?"],
    "history": ["history", "historical", "heritage"],
    "art": ["art", "galleries", "gallery"],
    "nature": ["nature", "parks?", "hiking"],
    "beaches": ["beach(?:es)?"],
    "architecture": ["architecture"],
    "culture": ["culture", "cultural"],
}

PACE_KEYWORDS = {
    "relaxed": ["relaxed", "relaxing", "slow", "leisurely", "chill", "easy"],
    "fast": [r"fast(?!\s*food)", "packed", "busy", "hectic"],
    "moderate": ["moderate", "balanced"],
}

NUMBER_WORDS = {
    "one": 1, "two": 2, "three": 3, "four": 4, "five": 5,
    "six": 6, "seven": 7, "eight": 8, "nine": 9, "ten": 10,
}

_CITY_PHRASE = re.compile(
    r"\b(?:visit(?:ing)?|trip to|going to|travel(?:l?ing)? to|headed to|fly(?:ing)? to)\s+"
    r"([A-Z][a-zA-Z]+(?:\s+[A-Z][a-zA-Z]+)?)"
)
_DAYS = re.compile(r"\b(\d{1,2}|" + "|".join(NUMBER_WORDS) + r")[\s-]*days?\b")
_MAX_TRAVEL = re.compile(r"(?:max(?:imum)?|no more than|at most|under)\s*(\d{1,3})\s*(?:min|minutes|mins)")


def _has_word(pattern: str, text: str) -> bool:
    return re.search(rf"\b{pattern}\b", text) is not None


class PreferenceExtractor:
    """Turns a user message into a partial preferences mapping."""

    async def extract(self, current: UserPreferences, message: str) -> Dict[str, Any]:
        raise NotImplementedError


class HeuristicPreferenceExtractor(PreferenceExtractor):
    """Keyword matching extractor used when no language model is available."""

    async def extract(self, current: UserPreferences, message: str) -> Dict[str, Any]:
        msg = message.lower()
        updates: Dict[str, Any] = {}

        city = self._extract_city(message, msg, bool(current.city))
        if city:
            updates["city"] = city

        days = _DAYS.search(msg)
        if days:
            value = days.group(1)
            updates["trip_days"] = NUMBER_WORDS.get(value) or int(value)
        elif _has_word("weekend", msg):
            updates["trip_days"] = 2

        window = normalize_time_window(msg, strict=True)
        if window:
            updates["daily_time_window"] = window

        for pace, patterns in PACE_KEYWORDS.items():
            if any(_has_word(p, msg) for p in patterns):
                updates["pace"] = pace
                break

        found = [
            interest
            for interest, patterns in INTEREST_KEYWORDS.items()
            if any(_has_word(p, msg) for p in patterns)
        ]
        if found:
            updates["interests"] = list(dict.fromkeys(current.interests + found))

        constraints = {}
        if _has_word("indoors?", msg):
            constraints["indoor_preference"] = True
        if any(_has_word(p, msg) for p in ("wheelchair", "limited mobility", "elderly")):
            constraints["mobility"] = "limited"
        max_travel = _MAX_TRAVEL.search(msg)
        if max_travel:
            constraints["max_travel_time_min"] = int(max_travel.group(1))
        if constraints:
            updates["constraints"] = constraints

        return updates

    def _extract_city(self, message: str, msg: str, city_set: bool) -> Optional[str]:
        for key, name in KNOWN_CITIES.items():
            if _has_word(key, msg):
                return name
        # "visit X" after a city is chosen usually names a place, not a city
        if city_set:
            return None
        match = _CITY_PHRASE.search(message)
        return match.group(1) if match else None


class LLMPreferenceExtractor(PreferenceExtractor):
    """Language-model backed extractor. Raises ExtractionError on unusable output."""

    def __init__(self, llm):
        self.llm = llm

    async def extract(self, current: UserPreferences, message: str) -> Dict[str, Any]:
        prompt = get_extraction_prompt(current.model_dump(), message)
        content = await complete(self.llm, prompt)
        try:
            return extract_json_object(content)
        except ValueError as e:
            raise ExtractionError(f"Could not parse extraction output: {e}") from e


class PreferenceManager:
    """Maintains the partial preference record and decides what to ask next."""

    def __init__(
        self,
        extractor: Optional[PreferenceExtractor] = None,
        fallback: Optional[PreferenceExtractor] = None,
    ):
        self.extractor = extractor or HeuristicPreferenceExtractor()
        self.fallback = fallback or HeuristicPreferenceExtractor()

    def get_initial_preferences(self) -> UserPreferences:
        return UserPreferences()

    def get_missing_fields(self, prefs: UserPreferences) -> List[str]:
        missing = []
        if not prefs.city:
            missing.append("city")
        if prefs.trip_days <= 0:
            missing.append("trip_days")
        if not prefs.daily_time_window:
            missing.append("daily_time_window")
        if not prefs.interests:
            missing.append("interests")
        return missing

    def get_next_question(self, prefs: UserPreferences) -> str:
        missing = self.get_missing_fields(prefs)
        if not missing:
            if not prefs.confirmed:
                return (
                    f"I have all the details for your trip to {prefs.city}. "
                    "Shall I proceed to generate the itinerary?"
                )
            return "Generating your itinerary..."
        return QUESTIONS[missing[0]]

    async def update_preferences(self, current: UserPreferences, message: str) -> UserPreferences:
        """Merge whatever the message says into a new preferences record."""
        try:
            extracted = await self.extractor.extract(current, message)
            return self.merge(current, extracted)
        except Exception as e:
            logger.warning(f"Extraction failed, falling back to heuristics: {e}")

        extracted = await self.fallback.extract(current, message)
        return self.merge(current, extracted)

    def merge(self, current: UserPreferences, extracted: Dict[str, Any]) -> UserPreferences:
        """Overwrite fields present in ``extracted``; interests accumulate."""
        data = current.model_dump()

        city = extracted.get("city")
        if isinstance(city, str) and city.strip():
            city = city.strip()
            data["city"] = city.title() if city.islower() else city

        if extracted.get("trip_days") is not None:
            data["trip_days"] = int(extracted["trip_days"])

        if extracted.get("daily_time_window"):
            window = normalize_time_window(str(extracted["daily_time_window"]))
            if window:
                data["daily_time_window"] = window

        pace = str(extracted.get("pace") or "").lower()
        if pace in PACES:
            data["pace"] = pace

        interests = extracted.get("interests")
        if isinstance(interests, str):
            interests = [interests]
        if interests:
            cleaned = [str(i).strip().lower() for i in interests if str(i).strip()]
            data["interests"] = list(dict.fromkeys(data["interests"] + cleaned))

        constraints = extracted.get("constraints")
        if isinstance(constraints, dict):
            known = set(data["constraints"])
            data["constraints"].update(
                {k: v for k, v in constraints.items() if k in known and v is not None}
            )

        return UserPreferences.model_validate(data)
