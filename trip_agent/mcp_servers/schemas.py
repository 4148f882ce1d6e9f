"""Input/output contracts for every tool behind the gateway."""
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from trip_agent.models import ItineraryDay, Location, Pace, POICandidate


# Place search
class SearchConstraints(BaseModel):
    indoor_preference: Optional[bool] = None
    max_travel_time_min: Optional[int] = None


class PoiSearchInput(BaseModel):
    city: str = Field(..., min_length=1, description="Name of the city (e.g., 'Jaipur')")
    interests: List[str] = Field(default_factory=list)
    constraints: Optional[SearchConstraints] = None


class PoiSearchOutput(BaseModel):
    candidates: List[POICandidate]


# Itinerary synthesis
class ItineraryBuilderInput(BaseModel):
    city: str = Field(..., min_length=1)
    pois: List[POICandidate]
    interests: List[str] = Field(default_factory=list)
    daily_time_window: str
    pace: Pace
    trip_days: int = Field(..., ge=1)


class ItineraryBuilderOutput(BaseModel):
    days: List[ItineraryDay]


# Travel time
TravelMode = Literal["driving", "walking", "transit"]


class TravelTimeInput(BaseModel):
    origin: Location
    destination: Location
    mode: TravelMode = "driving"


class TravelTimeOutput(BaseModel):
    travel_time_min: int = Field(..., ge=0)
    distance_km: float = Field(..., ge=0.0)


# Weather
class WeatherInput(BaseModel):
    city: str = Field(..., min_length=1)
    dates: Optional[List[str]] = None  # ISO dates


class ForecastDay(BaseModel):
    date: str
    summary: str
    rain_prob: float


class WeatherOutput(BaseModel):
    forecast: List[ForecastDay]
