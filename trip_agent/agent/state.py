from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

from trip_agent.models import Itinerary, POICandidate, UserPreferences


class ConversationStatus(str, Enum):
    COLLECTING_PREFERENCES = "collecting_preferences"
    GENERATING = "generating"
    EVALUATING = "evaluating"
    READY_FOR_UI = "ready_for_ui"
    CONFIRMED = "confirmed"


class ConversationState(BaseModel):
    """Everything the agent remembers about one session."""

    session_id: str
    status: ConversationStatus = ConversationStatus.COLLECTING_PREFERENCES
    preferences: UserPreferences = Field(default_factory=UserPreferences)
    current_itinerary: Optional[Itinerary] = None
    previous_itinerary: Optional[Itinerary] = None  # snapshot for edit evaluation
    last_user_message: str = ""
    edit_request: str = ""  # message that sent a finished plan back for changes
    valid_candidates: List[POICandidate] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    turns: int = 0
