"""Feasibility evaluation for itineraries.

Checks:
1. No POI is visited twice anywhere in the trip
2. Day count matches the requested trip length
3. Daily duration + travel fits the daily time window
4. No single transfer is unreasonably long
5. Pace consistency (stops per day)
"""
import logging
from typing import Any, Dict, List

from trip_agent.models import Itinerary, ItineraryDay, UserPreferences
from trip_agent.timewindow import parse_time_window

logger = logging.getLogger("evals.feasibility")


class FeasibilityEval:
    """Evaluates itinerary feasibility."""

    # Thresholds
    MAX_TRAVEL_TIME_MINUTES = 180  # No single trip inside a city above 3 hours
    RELAXED_MAX_BLOCKS = 3
    FAST_MIN_BLOCKS = 4

    def check_duplicates(self, itinerary: Itinerary) -> Dict[str, Any]:
        """Check that every POI appears at most once across all days."""
        seen = set()
        issues = []

        for day in itinerary.days:
            for block in day.blocks:
                if block.poi_id in seen:
                    issues.append(f"Duplicate POI {block.poi_id} found on day {day.day}.")
                seen.add(block.poi_id)

        return {
            "check": "duplicates",
            "passed": len(issues) == 0,
            "unique_pois": len(seen),
            "issues": issues,
        }

    def check_day_count(self, itinerary: Itinerary, preferences: UserPreferences) -> Dict[str, Any]:
        issues = []
        if len(itinerary.days) != preferences.trip_days:
            issues.append(
                f"Itinerary has {len(itinerary.days)} days, expected {preferences.trip_days}."
            )

        return {
            "check": "day_count",
            "passed": len(issues) == 0,
            "issues": issues,
        }

    def check_daily_duration(self, day: ItineraryDay, available_minutes: int) -> Dict[str, Any]:
        """
        Check if the day's visits plus travel fit within the time window.

        Args:
            day: Single day's plan
            available_minutes: Minutes available per day

        Returns:
            Evaluation result
        """
        total = sum(block.duration_min + block.travel_time_min for block in day.blocks)
        issues = []

        if total > available_minutes:
            issues.append(
                f"Day {day.day} total time ({total}m) exceeds window ({available_minutes}m)."
            )

        return {
            "day": day.day,
            "check": "daily_duration",
            "passed": len(issues) == 0,
            "total_minutes": total,
            "available_minutes": available_minutes,
            "issues": issues,
        }

    def check_travel_times(self, day: ItineraryDay, preferences: UserPreferences) -> Dict[str, Any]:
        """
        Check that no transfer exceeds the hard cap or the user's own limit.

        Args:
            day: Single day's plan
            preferences: Trip preferences (for max_travel_time_min)

        Returns:
            Evaluation result
        """
        limit = self.MAX_TRAVEL_TIME_MINUTES
        user_limit = preferences.constraints.max_travel_time_min
        if user_limit is not None:
            limit = min(limit, user_limit)

        issues = []
        for block in day.blocks:
            if block.travel_time_min > limit:
                issues.append(
                    f"Excessive travel time ({block.travel_time_min}m) to {block.poi_id} "
                    f"on day {day.day}. Max allowed: {limit}m."
                )

        return {
            "day": day.day,
            "check": "travel_times",
            "passed": len(issues) == 0,
            "issues": issues,
        }

    def check_pace_consistency(self, day: ItineraryDay, pace: str) -> Dict[str, Any]:
        count = len(day.blocks)
        issues = []

        if pace == "relaxed" and count > self.RELAXED_MAX_BLOCKS:
            issues.append(
                f"Day {day.day} has {count} stops; relaxed pace allows at most {self.RELAXED_MAX_BLOCKS}."
            )
        elif pace == "fast" and count < self.FAST_MIN_BLOCKS:
            issues.append(
                f"Day {day.day} has {count} stops; fast pace needs at least {self.FAST_MIN_BLOCKS}."
            )

        return {
            "day": day.day,
            "check": "pace_consistency",
            "passed": len(issues) == 0,
            "num_activities": count,
            "issues": issues,
        }

    def evaluate(self, itinerary: Itinerary, preferences: UserPreferences) -> Dict[str, Any]:
        """
        Run all feasibility checks on the itinerary.

        Args:
            itinerary: Constructed itinerary
            preferences: The preferences it was built for

        Returns:
            Complete evaluation results
        """
        logger.info("Running Feasibility Evaluation...")

        available = parse_time_window(preferences.daily_time_window)

        results: List[Dict[str, Any]] = [
            self.check_duplicates(itinerary),
            self.check_day_count(itinerary, preferences),
        ]
        for day in itinerary.days:
            results.append(self.check_daily_duration(day, available))
            results.append(self.check_travel_times(day, preferences))
            results.append(self.check_pace_consistency(day, preferences.pace))

        issues = [issue for r in results for issue in r["issues"]]
        for issue in issues:
            logger.warning(f"Feasibility Failed: {issue}")

        return {
            "eval_type": "feasibility",
            "passed": len(issues) == 0,
            "summary": {
                "total_days": len(itinerary.days),
                "available_minutes": available,
                "total_checks": len(results),
                "failed_checks": sum(1 for r in results if not r["passed"]),
            },
            "results": results,
            "issues": issues,
        }
