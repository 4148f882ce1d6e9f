"""Itinerary synthesis tool.

Turns a ranked POI subset into a day-structured block list. Travel fields
are left at zero; the construction pipeline fills them in afterwards.
"""
import logging
from typing import Any, Dict, List

from trip_agent.agent.prompt import get_itinerary_prompt
from trip_agent.llm import complete, extract_json_object
from trip_agent.mcp_servers.registry import Tool, ToolName
from trip_agent.mcp_servers.schemas import ItineraryBuilderInput, ItineraryBuilderOutput
from trip_agent.mcp_servers.travel_time import estimate_travel, haversine_km
from trip_agent.models import ItineraryBlock, ItineraryDay, POICandidate
from trip_agent.timewindow import parse_time_window

logger = logging.getLogger("itinerary-builder")

# Stops per day used by the deterministic planner
PACE_STOPS = {
    "relaxed": 2,
    "moderate": 3,
    "fast": 4,
}

TIME_SLOTS = ["Morning", "Afternoon", "Evening", "Night"]

MIN_DURATION = 30
MAX_DURATION = 120
UNKNOWN_TRAVEL_MIN = 15


def _travel_between(a: POICandidate, b: POICandidate) -> int:
    if not a.location or not b.location:
        return UNKNOWN_TRAVEL_MIN
    distance = haversine_km(a.location.lat, a.location.lng, b.location.lat, b.location.lng)
    return estimate_travel(distance)


def _nearest(last: POICandidate, pool: List[POICandidate]) -> POICandidate:
    if not last.location:
        return pool[0]
    located = [p for p in pool if p.location]
    if not located:
        return pool[0]
    return min(
        located,
        key=lambda p: haversine_km(last.location.lat, last.location.lng, p.location.lat, p.location.lng),
    )


def plan_itinerary(
    pois: List[POICandidate],
    trip_days: int,
    pace: str,
    daily_time_window: str,
) -> List[ItineraryDay]:
    """Greedy planner: best remaining POI opens each day, nearest neighbours fill it."""
    per_day = PACE_STOPS.get(pace, PACE_STOPS["moderate"])
    budget = parse_time_window(daily_time_window)
    pool = sorted(pois, key=lambda p: p.score, reverse=True)

    days = []
    for day_num in range(1, trip_days + 1):
        stops: List[POICandidate] = []
        while pool and len(stops) < per_day:
            nxt = _nearest(stops[-1], pool) if stops else pool[0]
            pool.remove(nxt)
            stops.append(nxt)

        travel = sum(_travel_between(a, b) for a, b in zip(stops, stops[1:]))
        if stops:
            share = (budget - travel) // len(stops)
            duration = max(MIN_DURATION, min(MAX_DURATION, share - share % 15))
        else:
            duration = 0

        blocks = [
            ItineraryBlock(
                time_of_day=TIME_SLOTS[min(i * len(TIME_SLOTS) // len(stops), len(TIME_SLOTS) - 1)],
                poi_id=poi.poi_id,
                poi_name=poi.name,
                duration_min=duration,
            )
            for i, poi in enumerate(stops)
        ]
        days.append(ItineraryDay(day=day_num, blocks=blocks))

    return days


def sanitize_days(raw_days: Any, pois: List[POICandidate], trip_days: int) -> List[Dict[str, Any]]:
    """Enforce the synthesis contract on model output.

    Keeps at most ``trip_days`` days, drops POI ids outside the supplied
    subset and any id already used earlier in the itinerary.
    """
    if not isinstance(raw_days, list):
        # Left for the output contract to reject
        return raw_days

    known = {p.poi_id: p for p in pois}
    seen = set()
    days: List[Dict[str, Any]] = []

    for raw_day in raw_days:
        if not isinstance(raw_day, dict):
            logger.warning(f"Skipping malformed day: {raw_day!r}")
            continue
        if len(days) >= trip_days:
            logger.warning(f"Dropping surplus day beyond {trip_days}")
            break

        raw_blocks = raw_day.get("blocks")
        blocks = []
        for raw_block in raw_blocks if isinstance(raw_blocks, list) else []:
            if not isinstance(raw_block, dict):
                logger.warning(f"Skipping malformed block: {raw_block!r}")
                continue
            poi_id = str(raw_block.get("poi_id", ""))
            if poi_id not in known:
                logger.warning(f"Removed invented POI: {poi_id}")
                continue
            if poi_id in seen:
                logger.warning(f"Removed duplicate POI: {poi_id}")
                continue
            seen.add(poi_id)
            blocks.append({
                "time_of_day": raw_block.get("time_of_day") or "Morning",
                "poi_id": poi_id,
                "poi_name": raw_block.get("poi_name") or known[poi_id].name,
                "duration_min": raw_block.get("duration_min"),
                "travel_time_min": 0,
                "travel_distance_km": 0.0,
            })

        days.append({"day": len(days) + 1, "blocks": blocks})

    if len(days) < trip_days:
        logger.warning(f"Synthesis produced {len(days)} of {trip_days} days")
    return days


class ItineraryBuilderTool(Tool):
    name = ToolName.ITINERARY_BUILDER
    description = "Generates a structured, day-wise itinerary based on candidate POIs and user constraints."
    input_model = ItineraryBuilderInput
    output_model = ItineraryBuilderOutput

    def __init__(self, llm=None):
        self.llm = llm

    async def execute(self, payload: ItineraryBuilderInput) -> Dict[str, Any]:
        logger.info(f"Generating {payload.trip_days}-day itinerary for {payload.city}")

        if self.llm is None:
            days = plan_itinerary(payload.pois, payload.trip_days, payload.pace, payload.daily_time_window)
            return {"days": [d.model_dump() for d in days]}

        poi_lines = [
            f"ID: {p.poi_id} | Name: {p.name} | Hours: {p.opening_hours} | "
            + (f"Lat: {p.location.lat:.4f}, Lng: {p.location.lng:.4f} | " if p.location else "")
            + f"Type: {', '.join(p.types)}"
            for p in payload.pois
        ]
        prompt = get_itinerary_prompt(
            payload.city,
            poi_lines,
            payload.interests,
            payload.daily_time_window,
            payload.pace,
            payload.trip_days,
        )
        content = await complete(self.llm, prompt)

        try:
            result = extract_json_object(content)
        except ValueError as e:
            logger.error(f"JSON parse failed, using deterministic planner: {e}")
            days = plan_itinerary(payload.pois, payload.trip_days, payload.pace, payload.daily_time_window)
            return {"days": [d.model_dump() for d in days]}

        return {"days": sanitize_days(result.get("days"), payload.pois, payload.trip_days)}
