from typing import Optional

from trip_agent.models import Itinerary


def itinerary_to_markdown(itinerary: Itinerary, city: Optional[str] = None) -> str:
    """Render an itinerary as the markdown used in chat replies and e-mails."""
    lines = [f"# Your trip to {city}" if city else "# Your itinerary"]
    for day in itinerary.days:
        lines.append("")
        lines.append(f"## Day {day.day}")
        for block in day.blocks:
            name = block.poi_name or block.poi_id
            entry = f"- {block.time_of_day}: {name} ({block.duration_min} mins)"
            if block.travel_time_min:
                entry += f", {block.travel_time_min} mins travel"
                if block.travel_distance_km is not None:
                    entry += f" / {block.travel_distance_km:.1f} km"
            lines.append(entry)
    return "\n".join(lines)
