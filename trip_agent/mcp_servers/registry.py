"""Tool registry: the single execution path for every external capability.

Each tool declares a pydantic input model and output model. The registry
validates the payload before running the tool and validates the result
after it ran, so callers can trust tool outputs unconditionally.
"""
import logging
from enum import Enum
from typing import Any, Dict, List, Type, Union

from pydantic import BaseModel, ValidationError

from trip_agent.errors import (
    InvalidInput,
    ToolExecutionError,
    ToolNotFound,
    ToolOutputViolation,
)

logger = logging.getLogger("tool-registry")


class ToolName(str, Enum):
    POI_SEARCH = "poi-search"
    ITINERARY_BUILDER = "itinerary-builder"
    TRAVEL_TIME = "travel-time"
    WEATHER = "weather"


class Tool:
    """Base class for a capability exposed through the registry.

    Subclasses set ``name``, ``description``, ``input_model`` and
    ``output_model`` and implement ``execute``.
    """

    name: str = ""
    description: str = ""
    input_model: Type[BaseModel] = BaseModel
    output_model: Type[BaseModel] = BaseModel

    async def execute(self, payload: BaseModel) -> Any:
        raise NotImplementedError


def _tool_key(name: Union[ToolName, str]) -> str:
    return name.value if isinstance(name, ToolName) else str(name)


def _error_fields(error: ValidationError) -> List[str]:
    fields = []
    for err in error.errors():
        field = ".".join(str(part) for part in err.get("loc", ())) or "payload"
        if field not in fields:
            fields.append(field)
    return fields


class ToolRegistry:
    """Named-tool dispatcher enforcing input and output contracts."""

    def __init__(self):
        self._tools: Dict[str, Tool] = {}

    def register(self, tool: Tool) -> None:
        key = _tool_key(tool.name)
        if not key:
            raise ValueError("Tool must declare a name")
        if key in self._tools:
            raise ValueError(f"Tool {key} is already registered")
        self._tools[key] = tool
        logger.info(f"Registered tool: {key}")

    def get(self, name: Union[ToolName, str]) -> Tool:
        tool = self._tools.get(_tool_key(name))
        if tool is None:
            raise ToolNotFound(_tool_key(name))
        return tool

    def tools(self) -> List[Tool]:
        return list(self._tools.values())

    def __contains__(self, name: Union[ToolName, str]) -> bool:
        return _tool_key(name) in self._tools

    async def invoke(self, name: Union[ToolName, str], payload: Any) -> BaseModel:
        """Validate, execute and re-validate a single tool call."""
        tool = self.get(name)
        key = _tool_key(name)

        # 1. Validate input; the tool never runs on a bad payload
        if isinstance(payload, BaseModel):
            payload = payload.model_dump()
        try:
            validated = tool.input_model.model_validate(payload)
        except ValidationError as e:
            fields = _error_fields(e)
            logger.warning(f"Rejected input for {key}: {fields}")
            raise InvalidInput(key, fields) from e

        logger.info(f"Executing {key} with inputs: {validated.model_dump_json()[:500]}")

        # 2. Execute
        try:
            result = await tool.execute(validated)
        except Exception as e:
            logger.error(f"Execution failed for {key}: {e}", exc_info=True)
            raise ToolExecutionError(key, e) from e

        # 3. Validate output
        if isinstance(result, BaseModel):
            result = result.model_dump()
        try:
            return tool.output_model.model_validate(result)
        except ValidationError as e:
            fields = _error_fields(e)
            logger.error(f"Tool {key} returned invalid output: {fields}")
            raise ToolOutputViolation(key, fields) from e
