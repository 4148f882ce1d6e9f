"""Conversation state machine driving one session from preferences to a finished plan.

collecting_preferences -> generating -> evaluating -> ready_for_ui -> confirmed
A failed evaluation or a generation error drops back to collecting_preferences
so the user can adjust and retry.
"""
import logging
import re
from typing import Callable, List, Optional

from pydantic import BaseModel, Field

from trip_agent.agent.graph import ItineraryPipeline
from trip_agent.agent.preferences import PreferenceManager
from trip_agent.agent.reasoning import ReasoningService, build_poi_context, select_targeted
from trip_agent.agent.state import ConversationState, ConversationStatus
from trip_agent.evals import EvaluationRunner
from trip_agent.exporters.email import EmailService
from trip_agent.exporters.markdown import itinerary_to_markdown
from trip_agent.exporters.pdf import render_itinerary_pdf
from trip_agent.models import EvaluationDetails, Itinerary, POICandidate, UserPreferences
from trip_agent.sessions import SessionRegistry

logger = logging.getLogger("travel-agent")

CONFIRMATION_TOKENS = ("yes", "generate", "proceed", "correct", "go ahead")
EXPLAIN_WORDS = ("why", "reason", "justification", "explain")
EXPORT_WORDS = ("pdf", "export")
EDIT_WORDS = ("edit", "change", "modify", "remove", "delete", "replace", "regenerate")
FINALIZE_WORDS = ("finalize", "looks good", "perfect", "that's great", "done")

EMAIL_RE = re.compile(r"[\w\.-]+@[\w\.-]+\.\w+")

READY_HINT = (
    "You can ask me 'Why?' to see the reasoning, 'Export PDF' to download it, "
    "'Email me at you@example.com' to receive it, or tell me what to change."
)


class AgentResponse(BaseModel):
    message: str
    status: ConversationStatus
    user_preferences: UserPreferences
    itinerary: Optional[Itinerary] = None
    evaluation_summary: Optional[EvaluationDetails] = None
    evaluation_issues: List[str] = Field(default_factory=list)
    candidates: List[POICandidate] = Field(default_factory=list)
    sources_available: bool = False
    pdf_id: Optional[str] = None
    pdf_bytes: Optional[bytes] = Field(None, exclude=True)


def is_confirmation(message: str) -> bool:
    lowered = message.lower()
    return any(token in lowered for token in CONFIRMATION_TOKENS)


def _mentions(message: str, words) -> bool:
    return any(word in message for word in words)


class TravelAgent:
    """Routes each user message according to the session's status."""

    def __init__(
        self,
        sessions: SessionRegistry,
        preference_manager: PreferenceManager,
        pipeline: ItineraryPipeline,
        evaluator: Optional[EvaluationRunner] = None,
        reasoning: Optional[ReasoningService] = None,
        pdf_renderer: Callable[[Itinerary, Optional[str]], bytes] = render_itinerary_pdf,
        mailer: Optional[EmailService] = None,
    ):
        self.sessions = sessions
        self.preference_manager = preference_manager
        self.pipeline = pipeline
        self.evaluator = evaluator or EvaluationRunner()
        self.reasoning = reasoning or ReasoningService()
        self.pdf_renderer = pdf_renderer
        self.mailer = mailer

    async def handle_message(self, session_id: str, message: str) -> AgentResponse:
        """Process one message; messages for the same session run one at a time."""
        state = await self.sessions.get_or_create(session_id)
        async with self.sessions.lock_for(session_id):
            state.turns += 1
            state.last_user_message = message
            logger.info(f"[{session_id}] turn {state.turns} in {state.status.value}")

            if state.status in (ConversationStatus.READY_FOR_UI, ConversationStatus.CONFIRMED):
                return await self._route_intent(state, message)
            return await self._collect(state, message)

    def _respond(self, state: ConversationState, message: str, **extra) -> AgentResponse:
        return AgentResponse(
            message=message,
            status=state.status,
            user_preferences=state.preferences,
            itinerary=state.current_itinerary,
            **extra,
        )

    # Preference collection

    async def _collect(self, state: ConversationState, message: str) -> AgentResponse:
        state.status = ConversationStatus.COLLECTING_PREFERENCES
        before = state.preferences
        updated = await self.preference_manager.update_preferences(before, message)
        changed = updated.model_dump(exclude={"confirmed"}) != before.model_dump(exclude={"confirmed"})
        state.preferences = updated

        if self.preference_manager.get_missing_fields(updated):
            return self._respond(state, self.preference_manager.get_next_question(updated))

        if changed:
            return self._respond(
                state,
                f"Got it! Updated your trip to {updated.trip_days} days in {updated.city}. Ready to generate?",
            )

        if is_confirmation(message):
            state.preferences = updated.model_copy(update={"confirmed": True})
            return await self._generate(state)

        return self._respond(state, self.preference_manager.get_next_question(updated))

    # Generation

    async def _generate(self, state: ConversationState) -> AgentResponse:
        state.status = ConversationStatus.GENERATING
        try:
            result = await self.pipeline.run(state.preferences)

            state.status = ConversationStatus.EVALUATING
            evaluation = self.evaluator.run_all_evals(
                result.itinerary,
                result.candidates,
                state.preferences,
                previous_itinerary=state.previous_itinerary,
                last_user_message=state.edit_request or None,
            )
        except Exception as e:
            logger.error(f"Generation flow failed: {e}", exc_info=True)
            self._reset(state)
            return self._respond(
                state,
                "Sorry, something went wrong while generating your itinerary. Please try again.",
            )

        if not evaluation.passed:
            logger.error(f"Evaluation failed: {evaluation.details.model_dump()}")
            self._reset(state)
            summary = "; ".join(evaluation.issues[:3])
            return self._respond(
                state,
                "Itinerary generation failed evaluation: "
                f"{summary}. Please try adjusting your preferences.",
                evaluation_summary=evaluation.details,
                evaluation_issues=evaluation.issues,
            )

        state.valid_candidates = result.candidates
        state.current_itinerary = result.itinerary
        state.edit_request = ""
        state.status = ConversationStatus.READY_FOR_UI

        text = itinerary_to_markdown(result.itinerary, state.preferences.city)
        return self._respond(
            state,
            f"{text}\n\n{READY_HINT}",
            evaluation_summary=evaluation.details,
            candidates=result.candidates,
            sources_available=True,
        )

    def _reset(self, state: ConversationState) -> None:
        state.status = ConversationStatus.COLLECTING_PREFERENCES
        state.preferences = state.preferences.model_copy(update={"confirmed": False})

    # Post-generation intents

    async def _route_intent(self, state: ConversationState, message: str) -> AgentResponse:
        req = message.lower()

        if _mentions(req, EXPLAIN_WORDS):
            return self._respond(state, await self._explain(state, req))
        if "email" in req:
            return self._respond(state, await self._email(state, message))
        if _mentions(req, EXPORT_WORDS):
            return self._export_pdf(state)
        if _mentions(req, EDIT_WORDS):
            return await self._edit(state, message)
        if _mentions(req, FINALIZE_WORDS):
            state.status = ConversationStatus.CONFIRMED
            return self._respond(state, "Your itinerary is finalized. Have a wonderful trip!")

        return self._respond(state, f"Your itinerary is ready. {READY_HINT}")

    async def _explain(self, state: ConversationState, query: str) -> str:
        if state.current_itinerary is None:
            return "No itinerary available to justify."

        contexts = build_poi_context(state.current_itinerary, state.valid_candidates)
        targeted = select_targeted(contexts, query)
        prefs = state.preferences
        justifications = await self.reasoning.justify_pois(
            targeted, prefs.city, prefs.interests, prefs.daily_time_window,
        )
        if not justifications:
            return "I couldn't find that location in your itinerary. Could you rephrase your question?"

        parts = []
        for ctx, justification in zip(targeted, justifications):
            part = f"**{ctx.name}:**\n{justification.answer}"
            if justification.citations:
                part += f"\n*Sources: {', '.join(justification.citations)}*"
            parts.append(part)
        return "\n\n".join(parts)

    def _render_pdf(self, state: ConversationState) -> bytes:
        return self.pdf_renderer(state.current_itinerary, state.preferences.city)

    def _export_pdf(self, state: ConversationState) -> AgentResponse:
        try:
            pdf = self._render_pdf(state)
        except Exception as e:
            logger.error(f"PDF generation failed: {e}", exc_info=True)
            return self._respond(state, "Sorry, I couldn't generate the PDF at this time.")
        return self._respond(state, "I've generated your PDF itinerary.", pdf_bytes=pdf)

    async def _email(self, state: ConversationState, message: str) -> str:
        match = EMAIL_RE.search(message)
        if not match:
            return "Please provide a valid email address (e.g., 'Email to test@example.com')."
        if self.mailer is None:
            return "Email delivery is not available right now."

        to_email = match.group(0)
        try:
            pdf = self._render_pdf(state)
        except Exception as e:
            logger.error(f"PDF generation for email failed: {e}", exc_info=True)
            pdf = None

        sent = await self.mailer.send_itinerary_email(
            to_email, state.current_itinerary, state.preferences.city, pdf_bytes=pdf,
        )
        if sent:
            return f"Email sent to {to_email}!"
        return "Failed to send email. Please check your system configuration."

    async def _edit(self, state: ConversationState, message: str) -> AgentResponse:
        """Return to collection, keeping a snapshot of the current plan to check the edit against."""
        logger.info("Edit requested; returning to preference collection")
        state.previous_itinerary = state.current_itinerary
        state.edit_request = message
        state.preferences = state.preferences.model_copy(update={"confirmed": False})
        return await self._collect(state, message)
