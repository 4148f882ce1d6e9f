import logging
from typing import Optional

from trip_agent.agent.graph import ItineraryPipeline
from trip_agent.agent.orchestrator import TravelAgent
from trip_agent.agent.preferences import (
    HeuristicPreferenceExtractor,
    LLMPreferenceExtractor,
    PreferenceManager,
)
from trip_agent.agent.reasoning import ReasoningService
from trip_agent.config import Settings, settings as default_settings
from trip_agent.evals import EvaluationRunner
from trip_agent.exporters.email import EmailService
from trip_agent.llm import create_chat_model
from trip_agent.mcp_servers.itinerary import ItineraryBuilderTool
from trip_agent.mcp_servers.poi_search import PoiSearchTool
from trip_agent.mcp_servers.registry import ToolRegistry
from trip_agent.mcp_servers.travel_time import TravelTimeTool
from trip_agent.mcp_servers.weather import WeatherTool
from trip_agent.sessions import SessionRegistry

logger = logging.getLogger("agent-factory")


def build_tool_registry(settings: Settings, llm=None) -> ToolRegistry:
    """Register the four domain tools."""
    registry = ToolRegistry()
    registry.register(PoiSearchTool(api_url=settings.wikipedia_api_url, timeout=settings.http_timeout))
    registry.register(ItineraryBuilderTool(llm=llm))
    registry.register(TravelTimeTool())
    registry.register(WeatherTool())
    return registry


class AgentFactory:
    """Singleton factory for creating and managing the agent instance."""

    _instance: Optional["AgentFactory"] = None
    _agent: Optional[TravelAgent] = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    @classmethod
    async def initialize(cls, sessions: SessionRegistry, settings: Optional[Settings] = None) -> TravelAgent:
        """Wire the agent and its collaborators around the given session registry."""
        if cls._agent is not None:
            logger.info("Agent already initialized")
            return cls._agent

        settings = settings or default_settings
        logger.info("Initializing agent...")

        llm = create_chat_model(settings)
        registry = build_tool_registry(settings, llm)
        logger.info(f"Loaded {len(registry.tools())} tools")

        extractor = LLMPreferenceExtractor(llm) if llm is not None else HeuristicPreferenceExtractor()

        cls._agent = TravelAgent(
            sessions=sessions,
            preference_manager=PreferenceManager(extractor=extractor),
            pipeline=ItineraryPipeline(
                registry,
                candidate_limit=settings.candidate_limit,
                travel_mode=settings.travel_mode,
                fallback_min=settings.travel_fallback_min,
                fallback_km=settings.travel_fallback_km,
            ),
            evaluator=EvaluationRunner(),
            reasoning=ReasoningService(llm),
            mailer=EmailService(settings),
        )

        logger.info("Agent initialized successfully")
        return cls._agent

    @classmethod
    async def cleanup(cls):
        """Clean up resources."""
        logger.info("Cleaning up agent resources...")
        cls._agent = None
        logger.info("Cleanup complete")
