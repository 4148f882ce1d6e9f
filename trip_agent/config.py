"""Configuration management for the trip planning agent."""
import logging
import sys
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # API Keys
    groq_api_key: str = ""  # Empty disables the language model paths
    resend_api_key: str = ""

    # Language model
    groq_model: str = "llama-3.3-70b-versatile"
    llm_temperature: float = 0.3

    # Email Settings
    email_sender: str = "onboarding@resend.dev"  # Default sender for Resend
    email_sender_name: str = "Trip Planner"

    # Place search
    wikipedia_api_url: str = "https://en.wikipedia.org/w/api.php"
    http_timeout: float = 10.0  # seconds

    # Itinerary construction
    candidate_limit: int = 20
    travel_mode: str = "driving"
    travel_fallback_min: int = 15
    travel_fallback_km: float = 2.0

    # Server Settings
    server_host: str = "0.0.0.0"
    server_port: int = 8000
    pdf_cache_size: int = 50  # rendered PDFs kept for download

    # Logging
    log_level: str = "INFO"
    log_file: str = "trip_agent.log"

    class Config:
        env_file = ".env"
        case_sensitive = False
        extra = "allow"


def configure_logging(level: str = "INFO", log_file: str = "", stream: bool = True) -> None:
    """Install the shared log format on the root logger."""
    handlers = [logging.StreamHandler(sys.stdout)] if stream else []
    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=handlers,
    )


# Global settings instance
settings = Settings()
