"""Itinerary construction pipeline.

search -> synthesize -> refine_travel, wired as a langgraph StateGraph.
Every external capability is reached through the tool registry.
"""
import asyncio
import logging
from typing import Dict, List, Optional, Tuple, TypedDict

from langgraph.graph import END, START, StateGraph
from pydantic import BaseModel

from trip_agent.errors import GenerationFailure, ToolError
from trip_agent.mcp_servers.registry import ToolName, ToolRegistry
from trip_agent.models import Itinerary, ItineraryDay, POICandidate, UserPreferences

logger = logging.getLogger("agent-graph")


class PipelineState(TypedDict, total=False):
    preferences: UserPreferences
    candidates: List[POICandidate]
    days: List[ItineraryDay]
    itinerary: Itinerary


class PipelineResult(BaseModel):
    candidates: List[POICandidate]
    itinerary: Itinerary


def top_candidates(candidates: List[POICandidate], limit: int) -> List[POICandidate]:
    return sorted(candidates, key=lambda c: c.score, reverse=True)[:limit]


class ItineraryPipeline:
    """Builds an itinerary for a complete, confirmed preference record."""

    def __init__(
        self,
        registry: ToolRegistry,
        candidate_limit: int = 20,
        travel_mode: str = "driving",
        fallback_min: int = 15,
        fallback_km: float = 2.0,
    ):
        self.registry = registry
        self.candidate_limit = candidate_limit
        self.travel_mode = travel_mode
        self.fallback_min = fallback_min
        self.fallback_km = fallback_km
        self.graph = create_pipeline_graph(self)

    async def run(self, preferences: UserPreferences) -> PipelineResult:
        logger.info(f"Starting generation for {preferences.city} ({preferences.trip_days} days)")
        try:
            final = await self.graph.ainvoke({"preferences": preferences})
        except GenerationFailure:
            raise
        except Exception as e:
            logger.error(f"Itinerary generation failed: {e}", exc_info=True)
            raise GenerationFailure(f"Itinerary generation failed: {e}") from e

        return PipelineResult(candidates=final["candidates"], itinerary=final["itinerary"])

    async def search(self, state: PipelineState) -> Dict:
        prefs = state["preferences"]
        result = await self.registry.invoke(
            ToolName.POI_SEARCH,
            {
                "city": prefs.city,
                "interests": prefs.interests,
                "constraints": {
                    "indoor_preference": prefs.constraints.indoor_preference,
                    "max_travel_time_min": prefs.constraints.max_travel_time_min,
                },
            },
        )
        if not result.candidates:
            raise GenerationFailure(f"No places found for {prefs.city}")

        logger.info(f"Found {len(result.candidates)} candidates")
        return {"candidates": result.candidates}

    async def synthesize(self, state: PipelineState) -> Dict:
        prefs = state["preferences"]
        subset = top_candidates(state["candidates"], self.candidate_limit)
        result = await self.registry.invoke(
            ToolName.ITINERARY_BUILDER,
            {
                "city": prefs.city,
                "pois": subset,
                "interests": prefs.interests,
                "daily_time_window": prefs.daily_time_window,
                "pace": prefs.pace,
                "trip_days": prefs.trip_days,
            },
        )
        return {"days": result.days}

    async def refine_travel(self, state: PipelineState) -> Dict:
        """Fill travel fields; days are independent, blocks within a day are not."""
        by_id = {c.poi_id: c for c in state["candidates"]}
        days = await asyncio.gather(*(self._refine_day(day, by_id) for day in state["days"]))
        return {"itinerary": Itinerary(days=list(days))}

    async def _refine_day(self, day: ItineraryDay, by_id: Dict[str, POICandidate]) -> ItineraryDay:
        blocks = []
        previous: Optional[POICandidate] = None

        for index, block in enumerate(day.blocks):
            poi = by_id.get(block.poi_id)
            if index == 0:
                minutes, distance = 0, 0.0
            else:
                minutes, distance = await self._travel_between(previous, poi)

            blocks.append(block.model_copy(update={
                "poi_name": block.poi_name or (poi.name if poi else None),
                "travel_time_min": minutes,
                "travel_distance_km": distance,
            }))
            previous = poi

        return ItineraryDay(day=day.day, blocks=blocks)

    async def _travel_between(
        self,
        origin: Optional[POICandidate],
        destination: Optional[POICandidate],
    ) -> Tuple[int, float]:
        if not origin or not destination or not origin.location or not destination.location:
            return self.fallback_min, self.fallback_km

        try:
            result = await self.registry.invoke(
                ToolName.TRAVEL_TIME,
                {
                    "origin": origin.location,
                    "destination": destination.location,
                    "mode": self.travel_mode,
                },
            )
        except ToolError as e:
            logger.warning(f"Travel time lookup failed, using fallback: {e}")
            return self.fallback_min, self.fallback_km

        return result.travel_time_min, result.distance_km


def create_pipeline_graph(pipeline: ItineraryPipeline):
    graph_builder = StateGraph(PipelineState)

    graph_builder.add_node("search", pipeline.search)
    graph_builder.add_node("synthesize", pipeline.synthesize)
    graph_builder.add_node("refine_travel", pipeline.refine_travel)

    graph_builder.add_edge(START, "search")
    graph_builder.add_edge("search", "synthesize")
    graph_builder.add_edge("synthesize", "refine_travel")
    graph_builder.add_edge("refine_travel", END)

    return graph_builder.compile()
