"""Weather forecast tool (stubbed)."""
from datetime import date

from trip_agent.mcp_servers.registry import Tool, ToolName
from trip_agent.mcp_servers.schemas import ForecastDay, WeatherInput, WeatherOutput


class WeatherTool(Tool):
    name = ToolName.WEATHER
    description = "Fetches weather forecast."
    input_model = WeatherInput
    output_model = WeatherOutput

    async def execute(self, payload: WeatherInput) -> WeatherOutput:
        dates = payload.dates or [date.today().isoformat()]
        return WeatherOutput(
            forecast=[ForecastDay(date=d, summary="Partly Cloudy", rain_prob=10) for d in dates]
        )
