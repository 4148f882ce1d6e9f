"""Grounding evaluation for itineraries.

Every scheduled POI must be one the search step actually surfaced.
"""
import logging
from typing import Any, Dict, Iterable

from trip_agent.models import Itinerary, POICandidate

logger = logging.getLogger("evals.grounding")


class GroundingEval:
    """Detects places that were not retrieved from a real data source."""

    def evaluate(self, itinerary: Itinerary, candidates: Iterable[POICandidate]) -> Dict[str, Any]:
        logger.info("Running Grounding Evaluation...")

        valid_ids = {c.poi_id for c in candidates}
        grounded, ungrounded = [], []

        for block in itinerary.iter_blocks():
            if block.poi_id in valid_ids:
                grounded.append(block.poi_id)
            else:
                ungrounded.append(block.poi_id)

        issues = [f"POI {poi_id} not found in valid candidates." for poi_id in ungrounded]
        for issue in issues:
            logger.warning(f"Grounding Failed: {issue}")

        return {
            "eval_type": "grounding",
            "passed": len(ungrounded) == 0,
            "grounded_pois": grounded,
            "ungrounded_pois": ungrounded,
            "issues": issues,
        }
