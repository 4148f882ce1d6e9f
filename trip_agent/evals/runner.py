"""Evaluation runner for coordinating all evaluation checks."""
import logging
from typing import Any, Callable, Dict, List, Optional

from trip_agent.models import (
    EvaluationDetails,
    EvaluationResult,
    Itinerary,
    POICandidate,
    UserPreferences,
)

from .edit_correctness import EditCorrectnessEval
from .feasibility import FeasibilityEval
from .grounding import GroundingEval

logger = logging.getLogger("evals.runner")


class EvaluationRunner:
    """Accepts or rejects a constructed itinerary.

    Feasibility, grounding and edit correctness are computed independently
    and always all three run; the overall status is their conjunction.
    """

    def __init__(self):
        self.feasibility_eval = FeasibilityEval()
        self.grounding_eval = GroundingEval()
        self.edit_correctness_eval = EditCorrectnessEval()

    def run_all_evals(
        self,
        itinerary: Itinerary,
        candidates: List[POICandidate],
        preferences: UserPreferences,
        previous_itinerary: Optional[Itinerary] = None,
        last_user_message: Optional[str] = None,
    ) -> EvaluationResult:
        logger.info("=" * 60)
        logger.info("Starting Itinerary Evaluation")
        logger.info("=" * 60)

        feasibility = self._run(
            "feasibility",
            lambda: self.feasibility_eval.evaluate(itinerary, preferences),
        )
        grounding = self._run(
            "grounding",
            lambda: self.grounding_eval.evaluate(itinerary, candidates),
        )
        edit = self._run(
            "edit_correctness",
            lambda: self.edit_correctness_eval.evaluate(itinerary, previous_itinerary, last_user_message),
        )

        details = EvaluationDetails(
            feasibility=_verdict(feasibility),
            grounding=_verdict(grounding),
            edit_correctness=_verdict(edit),
        )
        all_passed = all(r["passed"] for r in (feasibility, grounding, edit))
        issues = [
            f"[{r['eval_type']}] {issue}"
            for r in (feasibility, grounding, edit)
            for issue in r.get("issues", [])
        ]

        logger.info(f"Overall Status: {'PASSED' if all_passed else 'FAILED'}")
        logger.info(f"Details: {details.model_dump()}")

        return EvaluationResult(
            overall_status="pass" if all_passed else "fail",
            details=details,
            issues=issues,
        )

    def _run(self, eval_type: str, check: Callable[[], Dict[str, Any]]) -> Dict[str, Any]:
        try:
            result = check()
        except Exception as e:
            logger.error(f"{eval_type} evaluation failed: {e}", exc_info=True)
            return {
                "eval_type": eval_type,
                "passed": False,
                "issues": [f"Evaluation error: {e}"],
            }

        status = "PASSED" if result["passed"] else "FAILED"
        logger.info(f"  {eval_type}: {status}")
        return result


def _verdict(result: Dict[str, Any]) -> str:
    return "pass" if result["passed"] else "fail"
