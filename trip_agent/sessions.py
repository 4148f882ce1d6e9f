"""Session registry mapping session identifiers to conversation state."""
import asyncio
import logging
from typing import Dict, Optional

from trip_agent.agent.state import ConversationState

logger = logging.getLogger("session-manager")


class SessionRegistry:
    """In-memory conversation sessions for the lifetime of the process.

    Creation is guarded so two concurrent first messages for the same
    identifier share one state. Each session also gets its own lock, held
    by the agent while a message for that session is being processed.
    """

    def __init__(self):
        """Initialize session registry."""
        self.sessions: Dict[str, ConversationState] = {}
        self._locks: Dict[str, asyncio.Lock] = {}
        self._guard = asyncio.Lock()
        logger.info("Session registry initialized")

    async def get_or_create(self, session_id: str) -> ConversationState:
        """
        Return the session's state, creating it on first contact.

        Args:
            session_id: Caller-supplied session identifier

        Returns:
            The live ConversationState for that session
        """
        async with self._guard:
            state = self.sessions.get(session_id)
            if state is None:
                state = ConversationState(session_id=session_id)
                self.sessions[session_id] = state
                self._locks[session_id] = asyncio.Lock()
                logger.info(f"Created session {session_id}")
            return state

    def get(self, session_id: str) -> Optional[ConversationState]:
        return self.sessions.get(session_id)

    def lock_for(self, session_id: str) -> asyncio.Lock:
        """Per-session lock, created if the session was removed meanwhile."""
        return self._locks.setdefault(session_id, asyncio.Lock())

    async def remove(self, session_id: str) -> None:
        async with self._guard:
            state = self.sessions.pop(session_id, None)
            self._locks.pop(session_id, None)
        if state:
            logger.info(f"Removed session {session_id}")
        else:
            logger.warning(f"Attempted to remove non-existent session {session_id}")

    def count(self) -> int:
        """Get count of active sessions."""
        return len(self.sessions)
