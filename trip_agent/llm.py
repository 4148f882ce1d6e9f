"""Language model client shared by extraction, synthesis and reasoning."""
import json
import logging
from typing import Any, Dict, Optional

from langchain_core.messages import HumanMessage
from langchain_groq import ChatGroq

from trip_agent.config import Settings

logger = logging.getLogger("llm")


def create_chat_model(settings: Settings) -> Optional[ChatGroq]:
    """Build the Groq chat model, or None when no API key is configured."""
    if not settings.groq_api_key:
        logger.warning("GROQ_API_KEY not set; language model features use heuristics")
        return None

    return ChatGroq(
        model=settings.groq_model,
        api_key=settings.groq_api_key,
        temperature=settings.llm_temperature,
        max_tokens=None,
        timeout=None,
        max_retries=2,
    )


async def complete(llm, prompt: str) -> str:
    """Send a single user prompt and return the text content of the reply."""
    response = await llm.ainvoke([HumanMessage(content=prompt)])
    content = getattr(response, "content", response)
    return content if isinstance(content, str) else str(content)


def extract_json_object(text: str) -> Dict[str, Any]:
    """Parse the outermost JSON object embedded in a model reply.

    Raises ValueError when no object can be recovered.
    """
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end <= start:
        raise ValueError("No JSON object found in model output")

    parsed = json.loads(text[start:end + 1])
    if not isinstance(parsed, dict):
        raise ValueError("Model output is not a JSON object")
    return parsed
