import json
from typing import List

PACE_HINTS = {
    "relaxed": "1-2",
    "moderate": "3-4",
    "fast": "5+",
}


def get_extraction_prompt(current: dict, message: str) -> str:
    return f"""You are an AI Travel Assistant. Extract travel preferences from the user's message.

Current Preferences:
{json.dumps(current, indent=2)}

User Message: "{message}"

Extract and update fields: city, trip_days, daily_time_window, pace, interests, constraints.

RULES:
1. daily_time_window: 24-hour format HH:MM-HH:MM
   - "9 am to 6 pm" -> "09:00-18:00"
   - "9 am to 12 am" -> "09:00-00:00" (midnight is 00:00, never noon)
2. interests: lowercase list of ALL interests mentioned, including the current ones
   - "nightlife and food" -> ["nightlife", "food"]
3. trip_days: a number ("3 days" -> 3)
4. city: properly capitalised ("bangalore" -> "Bangalore")
5. pace: one of relaxed, moderate, fast
6. constraints: indoor_preference (bool), mobility ("normal" or "limited"),
   weather_sensitive (bool), max_travel_time_min (number)

Return ONLY a JSON object with the fields the user mentioned.
Do not include fields the user did not mention.
"""


def get_itinerary_prompt(
    city: str,
    poi_lines: List[str],
    interests: List[str],
    daily_time_window: str,
    pace: str,
    trip_days: int,
) -> str:
    interest_text = ", ".join(interests) if interests else "general sightseeing"
    pois = "\n".join(poi_lines)

    return f"""You are a geography-aware travel expert. Create a {trip_days}-day itinerary for {city}.

USER INTERESTS: {interest_text}
DAILY TIME WINDOW: {daily_time_window} ("09:00-00:00" means 9 AM to midnight)

AVAILABLE POIs (sorted by relevance):
{pois}

CONSTRAINTS:
- At least 80% of the selected POIs must relate to the user's interests.
- Generate EXACTLY {trip_days} days.
- Never repeat a POI, on the same day or across days.
- Group nearby POIs (check Lat/Lng) on the same day.
- PACING: {pace} ({PACE_HINTS.get(pace, "3-4")} spots per day).
- Use only POI IDs from the list above. Do not invent places.
- Respect opening hours: evening venues go in "Evening" or "Night".
- The sum of durations per day must fit inside the time window.

TIME OF DAY OPTIONS: "Morning", "Afternoon", "Evening", "Night" (only if the window allows)

OUTPUT FORMAT (JSON only):
{{ "days": [ {{ "day": 1, "blocks": [ {{ "time_of_day": "Morning", "poi_id": "poi_abc_1", "poi_name": "Lal Bagh", "duration_min": 120 }} ] }} ] }}
Do not output travel_time_min; it is calculated separately.
"""


def get_justification_prompt(
    name: str,
    description: str,
    city: str,
    interests: List[str],
    daily_time_window: str,
    scheduled_time: str,
    duration_min: int,
) -> str:
    return f"""You are a professional travel agent.

TASK:
Justify selecting "{name}" in {city} for the user.

CONTEXT:
{description or "N/A"}

DETAILS:
- User Interests: {", ".join(interests)}
- User Schedule: {daily_time_window or "Full day"}
- POI Schedule: {scheduled_time} ({duration_min} mins)

INSTRUCTIONS:
1. Be specific: mention architecture, food or history from the context.
2. Briefly confirm the timing is feasible.
3. OUTPUT MUST BE VALID JSON ONLY.

JSON FORMAT:
{{"why": "about 60 words on how this place matches the user's interests", "timing": "one sentence"}}
"""
