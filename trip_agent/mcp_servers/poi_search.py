"""Point-of-interest discovery using the Wikipedia API."""
import logging
import re
from typing import Any, Dict, List, Optional, Tuple

import httpx

from trip_agent.mcp_servers.registry import Tool, ToolName
from trip_agent.mcp_servers.schemas import PoiSearchInput, PoiSearchOutput
from trip_agent.mcp_servers.travel_time import haversine_km
from trip_agent.models import Location, POICandidate

logger = logging.getLogger("poi-search")

USER_AGENT = "TripPlannerAgent/1.0"

DEFAULT_CATEGORIES = ["Tourist attractions", "Museums", "Gardens", "Food", "Shopping"]
DEFAULT_OPENING_HOURS = "10:00 - 18:00"

GEOSEARCH_RADIUS_M = 10000
GEOSEARCH_LIMIT = 30
CATEGORY_LIMIT = 12
ENRICH_BATCH = 20
MAX_DISTANCE_KM = 50.0
INTEREST_BOOST = 0.3

# Titles that are not visitable places
BANNED_KEYWORDS = [
    "siege", "bombing", "battle", "war", "office", "establishment", "laboratory",
    "garrison", "headquarters", "ministry", "department", "metro station", "junction",
    "bus stand", "university of", "institute of", "industrial", "list of", "district",
    "division", "region", "state", "province", "territory", "taluk", "subdistrict",
    "airport",
]


async def _fetch_json(client: httpx.AsyncClient, url: str, params: Dict[str, Any]) -> Dict[str, Any]:
    resp = await client.get(url, params={**params, "format": "json"})
    resp.raise_for_status()
    return resp.json()


def _first_coordinates(data: Dict[str, Any]) -> Optional[Tuple[float, float]]:
    pages = data.get("query", {}).get("pages", {}) or {}
    for page in pages.values():
        coords = page.get("coordinates")
        if coords:
            return float(coords[0]["lat"]), float(coords[0]["lon"])
    return None


def _is_visitable(title: str, city: str) -> bool:
    lowered = title.lower()
    if lowered == city.lower():
        return False
    return not any(re.search(rf"\b{re.escape(keyword)}\b", lowered) for keyword in BANNED_KEYWORDS)


def score_candidate(distance_km: float, name: str, types: List[str], interests: List[str]) -> float:
    """Relevance in 0..1: proximity to the centre plus an interest-match boost."""
    proximity = max(0.0, 1.0 - distance_km / MAX_DISTANCE_KM)
    score = 0.5 + 0.2 * proximity

    haystack = [name.lower()] + [t.lower() for t in types]
    if any(interest.lower() in text for interest in interests for text in haystack):
        score += INTEREST_BOOST

    return round(min(1.0, score), 3)


class PoiSearchTool(Tool):
    name = ToolName.POI_SEARCH
    description = "Finds points of interest in a city from Wikipedia, ranked by relevance."
    input_model = PoiSearchInput
    output_model = PoiSearchOutput

    def __init__(self, api_url: str = "https://en.wikipedia.org/w/api.php", timeout: float = 10.0):
        self.api_url = api_url
        self.timeout = timeout

    async def execute(self, payload: PoiSearchInput) -> PoiSearchOutput:
        city, interests = payload.city, payload.interests
        logger.info(f"Searching POIs for {city} (Interests: {', '.join(interests)})")

        headers = {"User-Agent": USER_AGENT}
        async with httpx.AsyncClient(timeout=self.timeout, headers=headers) as client:
            # 1. Resolve city coordinates
            coords = await self._resolve_city(client, city)
            if coords is None:
                raise ValueError(f"Could not find coordinates for city: {city}")
            lat, lon = coords
            logger.info(f"City resolved: {lat}, {lon}")

            raw: Dict[str, Dict[str, Any]] = {}

            # 2. Landmarks around the centre
            geo = await _fetch_json(client, self.api_url, {
                "action": "query",
                "list": "geosearch",
                "gscoord": f"{lat}|{lon}",
                "gsradius": GEOSEARCH_RADIUS_M,
                "gslimit": GEOSEARCH_LIMIT,
            })
            for page in geo.get("query", {}).get("geosearch", []):
                raw.setdefault(page["title"], {
                    "name": page["title"],
                    "lat": page["lat"],
                    "lon": page["lon"],
                    "type": "landmark",
                })

            # 3. Interest and default categories
            categories = list(dict.fromkeys(interests + DEFAULT_CATEGORIES))
            for category in categories:
                try:
                    data = await _fetch_json(client, self.api_url, {
                        "action": "query",
                        "generator": "search",
                        "gsrsearch": f"{category} in {city}",
                        "gsrlimit": CATEGORY_LIMIT,
                        "prop": "coordinates|extracts",
                        "exintro": 1,
                        "explaintext": 1,
                        "exchars": 300,
                    })
                except httpx.HTTPError as e:
                    logger.warning(f"Category search failed for {category}: {e}")
                    continue

                for page in (data.get("query", {}).get("pages", {}) or {}).values():
                    title = page.get("title", "")
                    if not page.get("coordinates") or title in raw:
                        continue
                    raw[title] = {
                        "name": title,
                        "lat": page["coordinates"][0]["lat"],
                        "lon": page["coordinates"][0]["lon"],
                        "description": page.get("extract"),
                        "type": category.lower(),
                    }

            # 4. Enrich missing descriptions
            await self._enrich_descriptions(client, raw)

        candidates = self._normalize(city, interests, (lat, lon), list(raw.values()))
        logger.info(f"Found {len(candidates)} candidates for {city}")
        return PoiSearchOutput(candidates=candidates)

    async def _resolve_city(self, client: httpx.AsyncClient, city: str) -> Optional[Tuple[float, float]]:
        data = await _fetch_json(client, self.api_url, {
            "action": "query",
            "prop": "coordinates",
            "titles": city,
            "redirects": 1,
        })
        coords = _first_coordinates(data)
        if coords:
            return coords

        fallback = await _fetch_json(client, self.api_url, {
            "action": "query",
            "generator": "search",
            "gsrsearch": city,
            "gsrlimit": 1,
            "prop": "coordinates",
        })
        return _first_coordinates(fallback)

    async def _enrich_descriptions(self, client: httpx.AsyncClient, raw: Dict[str, Dict[str, Any]]) -> None:
        titles = [title for title, place in raw.items() if not place.get("description")]
        for i in range(0, len(titles), ENRICH_BATCH):
            chunk = titles[i:i + ENRICH_BATCH]
            try:
                data = await _fetch_json(client, self.api_url, {
                    "action": "query",
                    "prop": "extracts",
                    "exintro": 1,
                    "explaintext": 1,
                    "exchars": 300,
                    "titles": "|".join(chunk),
                })
            except httpx.HTTPError as e:
                logger.warning(f"Description enrichment failed: {e}")
                continue

            for page in (data.get("query", {}).get("pages", {}) or {}).values():
                place = raw.get(page.get("title", ""))
                if place is not None and page.get("extract"):
                    place["description"] = page["extract"]

    def _normalize(
        self,
        city: str,
        interests: List[str],
        centre: Tuple[float, float],
        places: List[Dict[str, Any]],
    ) -> List[POICandidate]:
        prefix = city.lower().replace(" ", "")[:3]
        candidates = []

        for place in places:
            if not _is_visitable(place["name"], city):
                continue

            distance = haversine_km(centre[0], centre[1], place["lat"], place["lon"])
            if distance > MAX_DISTANCE_KM:
                logger.warning(f"Filtering out distant POI: {place['name']} ({distance:.1f}km away)")
                continue

            types = [place.get("type") or "point_of_interest"]
            candidates.append(POICandidate(
                poi_id=f"poi_{prefix}_{len(candidates)}",
                score=score_candidate(distance, place["name"], types, interests),
                name=place["name"],
                description=place.get("description") or f"A location of interest in {city}.",
                location=Location(lat=place["lat"], lng=place["lon"]),
                opening_hours=DEFAULT_OPENING_HOURS,
                types=types,
            ))

        return sorted(candidates, key=lambda c: c.score, reverse=True)
