"""Session manager: the current wizard session of every user"""
import logging
from typing import Any, Dict, List, Optional, Tuple

import wizard
from wizard import GenerationFailed, Session

logger = logging.getLogger(__name__)


class SessionManager:
    """Keeps one wizard session per user and settles generation results"""

    def __init__(self):
        self.sessions: Dict[int, Session] = {}

    def get_session(self, user_id: int) -> Session:
        """Return the user's session, starting one if needed"""
        if user_id not in self.sessions:
            self.sessions[user_id] = wizard.start_session()
            logger.info(f"Started session {self.sessions[user_id].token} for user {user_id}")
        return self.sessions[user_id]

    def reset_session(self, user_id: int) -> Session:
        """Replace the user's session with a fresh one"""
        session = wizard.reset_session(self.sessions.get(user_id))
        self.sessions[user_id] = session
        logger.info(f"Session of user {user_id} reset (token {session.token})")
        return session

    def submit_answer(self, user_id: int, key: str, value: Any) -> Session:
        """Answer the pending question"""
        session = self.get_session(user_id)
        return wizard.submit_answer(session, key, value)

    def toggle_selection(self, user_id: int, option: str) -> List[str]:
        """Toggle an option of the pending multi-choice question"""
        session = self.get_session(user_id)
        return wizard.toggle_selection(session, option)

    def submit_selection(self, user_id: int) -> Session:
        """Submit the staged multi-choice selection"""
        session = self.get_session(user_id)
        return wizard.submit_selection(session)

    def begin_generation(self, user_id: int) -> Tuple[int, str]:
        """Mark generation as in flight; returns the session token and the frozen request"""
        session = self.get_session(user_id)
        token, request = wizard.confirm_generation(session)
        logger.info(f"Generating website for user {user_id} (session {token})")
        return token, request

    async def finish_generation(self, user_id: int, token: int, request: str, client) -> Optional[Session]:
        """Send the request once and settle the outcome.

        Returns the settled session, or None when the user reset the wizard
        while the request was in flight and the result was dropped.
        """
        try:
            html = await client.generate_website(request)
        except GenerationFailed as e:
            return self.settle_generation(user_id, token, error=str(e))
        except Exception as e:
            logger.error(f"Unexpected error while generating website for user {user_id}: {e}")
            return self.settle_generation(user_id, token, error=f"Request failed: {e}")

        return self.settle_generation(user_id, token, text=html)

    def settle_generation(
        self,
        user_id: int,
        token: int,
        text: Optional[str] = None,
        error: Optional[str] = None
    ) -> Optional[Session]:
        """Apply a generation result to the user's current session if it is still the same one"""
        session = self.sessions.get(user_id)
        if session is None or session.token != token:
            logger.warning(f"Discarding stale generation result for user {user_id} (session {token})")
            return None

        if error is not None:
            applied = wizard.fail_generation(session, token, error)
        else:
            applied = wizard.complete_generation(session, token, text or "")
        return session if applied else None

    def get_transcript(self, user_id: int) -> List[wizard.Event]:
        """Get the conversation events of the user's session"""
        return list(self.get_session(user_id).events)


# Global session manager instance
session_manager = SessionManager()
