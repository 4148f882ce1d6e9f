import asyncio

import pytest

from trip_agent.mcp_servers.schemas import TravelTimeInput
from trip_agent.mcp_servers.travel_time import BUFFER_MIN, TravelTimeTool, estimate_travel, haversine_km


def test_haversine_known_distance():
    # MG Road to Lalbagh, Bangalore
    distance = haversine_km(12.9756, 77.6067, 12.9507, 77.5848)
    assert distance == pytest.approx(3.63, abs=0.05)


def test_haversine_zero_for_same_point():
    assert haversine_km(48.8584, 2.2945, 48.8584, 2.2945) == 0


@pytest.mark.parametrize("mode,expected", [
    ("driving", 20 + BUFFER_MIN),
    ("walking", 133 + BUFFER_MIN),
    ("transit", 40 + BUFFER_MIN),
])
def test_estimate_by_mode(mode, expected):
    assert estimate_travel(10.0, mode) == expected


def test_tool_rounds_distance():
    tool = TravelTimeTool()
    payload = TravelTimeInput(
        origin={"lat": 12.9756, "lng": 77.6067},
        destination={"lat": 12.9507, "lng": 77.5848},
        mode="walking",
    )

    result = asyncio.run(tool.execute(payload))

    assert result.distance_km == round(result.distance_km, 2)
    assert result.travel_time_min == estimate_travel(result.distance_km, "walking")
