"""On-demand justifications for the places in an itinerary."""
import logging
from typing import List, Optional

from pydantic import BaseModel

from trip_agent.agent.prompt import get_justification_prompt
from trip_agent.llm import complete, extract_json_object
from trip_agent.models import Itinerary, POICandidate, ReasoningResponse

logger = logging.getLogger("reasoning")


class PoiContext(BaseModel):
    poi_id: str
    name: str
    description: Optional[str] = None
    scheduled_time: str = ""
    duration_min: int = 0
    travel_time_min: int = 0


def build_poi_context(itinerary: Itinerary, candidates: List[POICandidate]) -> List[PoiContext]:
    by_id = {c.poi_id: c for c in candidates}
    contexts = []
    for day in itinerary.days:
        for block in day.blocks:
            candidate = by_id.get(block.poi_id)
            contexts.append(PoiContext(
                poi_id=block.poi_id,
                name=(candidate.name if candidate and candidate.name else block.poi_name) or block.poi_id,
                description=candidate.description if candidate else None,
                scheduled_time=f"Day {day.day} {block.time_of_day}",
                duration_min=block.duration_min,
                travel_time_min=block.travel_time_min,
            ))
    return contexts


def select_targeted(contexts: List[PoiContext], query: str) -> List[PoiContext]:
    """Narrow to the places the question names; all of them if it names none.

    A place matches when its full name, or any word of it longer than three
    letters, appears in the question.
    """
    query = query.lower()
    targeted = []
    for ctx in contexts:
        name = ctx.name.lower()
        if name in query or any(len(word) > 3 and word in query for word in name.split()):
            targeted.append(ctx)
    return targeted or contexts


class ReasoningService:
    """Explains why each place was picked and whether its timing works."""

    def __init__(self, llm=None):
        self.llm = llm

    async def justify_pois(
        self,
        pois: List[PoiContext],
        city: str,
        interests: List[str],
        daily_time_window: str = "",
    ) -> List[ReasoningResponse]:
        logger.info(f"Generating justifications for {len(pois)} POI(s)")
        results = []
        for poi in pois:
            citations = [f"Wikipedia: {poi.name}"] if poi.description else []
            if self.llm is None:
                results.append(self._fallback(poi, interests, citations))
                continue
            try:
                results.append(await self._justify(poi, city, interests, daily_time_window, citations))
            except Exception as e:
                logger.warning(f"Justification failed for {poi.name}: {e}")
                results.append(self._fallback(poi, interests, citations))
        return results

    async def _justify(
        self,
        poi: PoiContext,
        city: str,
        interests: List[str],
        daily_time_window: str,
        citations: List[str],
    ) -> ReasoningResponse:
        prompt = get_justification_prompt(
            poi.name,
            poi.description or "",
            city,
            interests,
            daily_time_window,
            poi.scheduled_time,
            poi.duration_min,
        )
        parsed = extract_json_object(await complete(self.llm, prompt))
        why = parsed.get("why") or f"{poi.name} is a great match for your interests."
        timing = parsed.get("timing") or "The timing fits your schedule."
        return ReasoningResponse(answer=f"**Why:** {why}\n**Timing:** {timing}", citations=citations)

    def _fallback(self, poi: PoiContext, interests: List[str], citations: List[str]) -> ReasoningResponse:
        if poi.description:
            why = poi.description[:200].rstrip()
            if len(poi.description) > 200:
                why += "..."
        else:
            why = f"Matches your interest in {', '.join(interests) or 'sightseeing'}."
        timing = f"{poi.scheduled_time}, {poi.duration_min} mins fits your schedule."
        return ReasoningResponse(answer=f"**Why:** {why}\n**Timing:** {timing}", citations=citations)
