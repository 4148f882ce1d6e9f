"""Edit correctness evaluation for itinerary modifications.

Only runs when both a previous itinerary and the user's request are known.
Removal requests are detected and the POI diff is reported, but the verdict
is always pass: no diff rule is enforced yet.
"""
import logging
from typing import Any, Dict, Optional

from trip_agent.models import Itinerary

logger = logging.getLogger("evals.edit_correctness")

REMOVAL_WORDS = ("remove", "delete")


class EditCorrectnessEval:
    """Evaluates correctness of itinerary edits."""

    def compare_pois(self, previous: Itinerary, current: Itinerary) -> Dict[str, Any]:
        before, after = previous.poi_ids(), current.poi_ids()
        return {
            "removed": sorted(before - after),
            "added": sorted(after - before),
            "kept": sorted(before & after),
        }

    def evaluate(
        self,
        current: Itinerary,
        previous: Optional[Itinerary] = None,
        request: Optional[str] = None,
    ) -> Dict[str, Any]:
        if previous is None or not request:
            return {"eval_type": "edit_correctness", "passed": True, "skipped": True, "issues": []}

        logger.info("Running Edit Correctness Evaluation...")

        lowered = request.lower()
        removal_requested = any(word in lowered for word in REMOVAL_WORDS)
        diff = self.compare_pois(previous, current)

        if removal_requested:
            logger.info(
                f"Removal requested; removed={diff['removed']} added={diff['added']}"
            )

        return {
            "eval_type": "edit_correctness",
            "passed": True,
            "skipped": False,
            "removal_requested": removal_requested,
            "diff": diff,
            "issues": [],
        }
