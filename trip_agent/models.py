"""Core data model shared by the tools, the pipeline and the evaluators."""
from typing import Iterator, List, Literal, Optional, Set

from pydantic import BaseModel, ConfigDict, Field

Pace = Literal["relaxed", "moderate", "fast"]
Verdict = Literal["pass", "fail"]


class TripConstraints(BaseModel):
    indoor_preference: bool = False
    mobility: Literal["normal", "limited"] = "normal"
    weather_sensitive: bool = True
    max_travel_time_min: Optional[int] = Field(None, ge=0)


class UserPreferences(BaseModel):
    """Partial preference record built up over the conversation.

    Empty string / zero / empty list mean "not provided yet".
    """

    city: str = ""
    trip_days: int = Field(0, ge=0)
    daily_time_window: str = ""  # "HH:MM-HH:MM", 24-hour
    pace: Pace = "moderate"
    interests: List[str] = Field(default_factory=list)
    constraints: TripConstraints = Field(default_factory=TripConstraints)
    confirmed: bool = False


class Location(BaseModel):
    lat: float
    lng: float


class POICandidate(BaseModel):
    """A place surfaced by the search tool. Immutable once received."""

    model_config = ConfigDict(frozen=True)

    poi_id: str
    score: float = Field(ge=0.0, le=1.0)
    name: Optional[str] = None
    description: Optional[str] = None
    location: Optional[Location] = None
    opening_hours: Optional[str] = None
    types: List[str] = Field(default_factory=list)


class ItineraryBlock(BaseModel):
    time_of_day: str
    poi_id: str
    poi_name: Optional[str] = None
    duration_min: int = Field(ge=0)
    travel_time_min: int = Field(0, ge=0)
    travel_distance_km: Optional[float] = Field(None, ge=0.0)


class ItineraryDay(BaseModel):
    day: int = Field(ge=1)
    blocks: List[ItineraryBlock] = Field(default_factory=list)


class Itinerary(BaseModel):
    days: List[ItineraryDay] = Field(default_factory=list)

    def iter_blocks(self) -> Iterator[ItineraryBlock]:
        for day in self.days:
            yield from day.blocks

    def poi_ids(self) -> Set[str]:
        return {block.poi_id for block in self.iter_blocks()}


class EvaluationDetails(BaseModel):
    feasibility: Verdict
    grounding: Verdict
    edit_correctness: Verdict


class EvaluationResult(BaseModel):
    overall_status: Verdict
    details: EvaluationDetails
    issues: List[str] = Field(default_factory=list)

    @property
    def passed(self) -> bool:
        return self.overall_status == "pass"


class ReasoningResponse(BaseModel):
    answer: str
    citations: List[str] = Field(default_factory=list)
