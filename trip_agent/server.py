"""FastAPI server for the trip planning agent."""
import logging
import uuid
from collections import OrderedDict

from dotenv import load_dotenv
from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel, Field

from trip_agent.agent.factory import AgentFactory
from trip_agent.agent.orchestrator import TravelAgent
from trip_agent.config import configure_logging, settings
from trip_agent.sessions import SessionRegistry

# Load environment variables
load_dotenv()

configure_logging(settings.log_level, settings.log_file)

logger = logging.getLogger("server")

# Create FastAPI app
app = FastAPI(
    title="Trip Planner Agent",
    description="Conversational itinerary planning assistant",
    version="1.0.0",
)

# CORS middleware for local development
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Restrict in production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Set in the startup event
session_registry: SessionRegistry = None
agent: TravelAgent = None

# Rendered PDFs by download id, oldest first
pdf_cache: "OrderedDict[str, bytes]" = OrderedDict()


class ChatRequest(BaseModel):
    session_id: str = Field(default_factory=lambda: f"session-{uuid.uuid4()}")
    message: str = Field(..., min_length=1)


@app.on_event("startup")
async def startup_event():
    """Initialize services on server startup."""
    global session_registry, agent

    logger.info("=== Starting Trip Planner Server ===")
    logger.info(f"Server host: {settings.server_host}:{settings.server_port}")
    logger.info(f"Model: {settings.groq_model if settings.groq_api_key else 'heuristics only'}")

    session_registry = SessionRegistry()
    agent = await AgentFactory.initialize(session_registry, settings)

    logger.info("=== Server startup complete ===")


@app.on_event("shutdown")
async def shutdown_event():
    """Clean up resources on server shutdown."""
    logger.info("=== Shutting down server ===")
    await AgentFactory.cleanup()
    logger.info("=== Shutdown complete ===")


@app.get("/api/health")
async def health_check():
    """Health check endpoint - basic liveness probe."""
    return {
        "status": "healthy",
        "service": "trip-planner-agent",
        "version": "1.0.0",
        "active_sessions": session_registry.count() if session_registry else 0,
    }


def cache_pdf(content: bytes) -> str:
    """Store a rendered PDF and evict the oldest beyond the configured size."""
    pdf_id = uuid.uuid4().hex
    pdf_cache[pdf_id] = content
    while len(pdf_cache) > max(settings.pdf_cache_size, 1):
        evicted, _ = pdf_cache.popitem(last=False)
        logger.info(f"Evicted cached PDF {evicted}")
    return pdf_id


@app.post("/chat")
async def chat(request: ChatRequest):
    """
    Send one user message to the agent.

    Args:
        request: Session identifier and the user's message

    Returns:
        The agent's response payload for that session
    """
    if agent is None:
        return JSONResponse(
            status_code=503,
            content={"ready": False, "message": "Agent not initialized yet"},
        )

    response = await agent.handle_message(request.session_id, request.message)

    if response.pdf_bytes:
        pdf_id = cache_pdf(response.pdf_bytes)
        response.pdf_id = pdf_id
        response.message = f"{response.message} Download it at /download-pdf/{pdf_id}"
        logger.info(f"Cached PDF {pdf_id} for session {request.session_id}")

    payload = response.model_dump(mode="json")
    payload["session_id"] = request.session_id
    return payload


@app.get("/download-pdf/{pdf_id}")
async def download_pdf(pdf_id: str):
    content = pdf_cache.get(pdf_id)
    if content is None:
        raise HTTPException(status_code=404, detail="PDF not found")

    return Response(
        content=content,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="itinerary_{pdf_id}.pdf"'},
    )


if __name__ == "__main__":
    import uvicorn

    # Run server
    uvicorn.run(
        "trip_agent.server:app",
        host=settings.server_host,
        port=settings.server_port,
        log_level=settings.log_level.lower(),
    )
