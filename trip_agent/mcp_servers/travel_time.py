"""Travel time estimation between two coordinates."""
import logging
import math

from trip_agent.mcp_servers.registry import Tool, ToolName
from trip_agent.mcp_servers.schemas import TravelTimeInput, TravelTimeOutput

logger = logging.getLogger("travel-time")

EARTH_RADIUS_KM = 6371.0

# Average city speeds in km/h
SPEEDS_KMH = {
    "driving": 30.0,
    "walking": 4.5,
    "transit": 15.0,
}

# Extra minutes for parking, stops and traffic lights
BUFFER_MIN = 10


def haversine_km(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Great-circle distance in kilometres."""
    d_lat = math.radians(lat2 - lat1)
    d_lng = math.radians(lng2 - lng1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lng / 2) ** 2
    )
    return EARTH_RADIUS_KM * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def estimate_travel(distance_km: float, mode: str = "driving") -> int:
    speed = SPEEDS_KMH.get(mode, SPEEDS_KMH["driving"])
    return round(distance_km / speed * 60) + BUFFER_MIN


class TravelTimeTool(Tool):
    name = ToolName.TRAVEL_TIME
    description = "Estimates travel time and distance between two geographic coordinates."
    input_model = TravelTimeInput
    output_model = TravelTimeOutput

    async def execute(self, payload: TravelTimeInput) -> TravelTimeOutput:
        origin, destination = payload.origin, payload.destination
        distance = haversine_km(origin.lat, origin.lng, destination.lat, destination.lng)
        minutes = estimate_travel(distance, payload.mode)
        logger.debug(f"{payload.mode}: {distance:.2f} km -> {minutes} min")
        return TravelTimeOutput(travel_time_min=minutes, distance_km=round(distance, 2))
