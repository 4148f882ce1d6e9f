"""Exception taxonomy for the trip planning agent."""
from typing import List, Optional


class TripAgentError(Exception):
    """Base class for all errors raised by this package."""


class ToolError(TripAgentError):
    """Raised by the tool gateway."""

    def __init__(self, tool_name: str, message: str):
        self.tool_name = tool_name
        super().__init__(message)


class ToolNotFound(ToolError):
    """No tool is registered under the requested name."""

    def __init__(self, tool_name: str):
        super().__init__(tool_name, f"Tool {tool_name} not found")


class InvalidInput(ToolError):
    """Caller supplied arguments that violate the tool's input contract.

    The tool is never executed when this is raised.
    """

    def __init__(self, tool_name: str, fields: List[str], detail: Optional[str] = None):
        self.fields = fields
        message = f"Invalid input for tool {tool_name}: {', '.join(fields) or 'payload'}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(tool_name, message)


class ToolExecutionError(ToolError):
    """The tool's own effect failed; the original exception is chained."""

    def __init__(self, tool_name: str, cause: BaseException):
        self.cause = cause
        super().__init__(tool_name, f"Tool {tool_name} failed: {cause}")


class ToolOutputViolation(ToolError):
    """The tool ran but returned data that breaks its output contract.

    Side effects of the tool have already happened and are not undone.
    """

    def __init__(self, tool_name: str, fields: List[str]):
        self.fields = fields
        super().__init__(
            tool_name,
            f"Tool {tool_name} output violation: {', '.join(fields) or 'payload'}",
        )


class ExtractionError(TripAgentError):
    """Preference extraction produced no usable result."""


class GenerationFailure(TripAgentError):
    """Itinerary construction aborted before evaluation."""
