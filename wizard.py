"""Wizard engine: question sequencing, answer collection and prompt synthesis"""
import itertools
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Tuple

from questions import QUESTIONS, AnswerMode, Question, empty_answers
from states import TRANSITIONS, GenerationState
from templates import (
    GENERATING_MESSAGE, GENERATION_FAILED_MESSAGE, GENERATION_SUCCEEDED_MESSAGE,
    NONE_SPECIFIED, PROMPT_READY_MESSAGE, WEBSITE_PROMPT_TEMPLATE, WELCOME_MESSAGE
)

logger = logging.getLogger(__name__)

# Session tokens are unique per process and only ever grow, so a result
# from a replaced session can never be mistaken for the current one
_session_tokens = itertools.count(1)


class WizardError(Exception):
    """Base class for wizard errors"""


class InvalidAnswerKey(WizardError):
    """The answer does not belong to the pending question"""


class EmptyMultiChoice(WizardError):
    """A multi-choice answer was submitted without any selection"""


class InvalidAnswerValue(WizardError):
    """The answer does not fit the pending question's answer mode or choices"""


class WizardStateError(WizardError):
    """The operation is not allowed in the current session state"""


class GenerationFailed(WizardError):
    """The generation service did not return a website"""


class EventKind(str, Enum):
    QUESTION_POSED = "question"
    ANSWER_RECORDED = "answer"
    SYSTEM_NOTICE = "system"


@dataclass
class Event:
    """A transcript entry; only ``answered`` may change after it is appended"""

    id: int
    kind: EventKind
    content: str
    question_key: Optional[str] = None
    answered: bool = False

    def mark_answered(self):
        if self.kind != EventKind.QUESTION_POSED:
            raise WizardStateError(f"Event {self.id} is not a question")
        if self.answered:
            raise WizardStateError(f"Question event {self.id} is already answered")
        self.answered = True


@dataclass
class Session:
    """One run of the wizard, from the welcome notice to a generated website"""

    token: int
    index: int = 0
    answers: Dict[str, Any] = field(default_factory=empty_answers)
    events: List[Event] = field(default_factory=list)
    generation_state: GenerationState = GenerationState.IDLE
    staging: Optional[List[str]] = None
    request: str = ""
    artifact: str = ""
    error: str = ""

    @property
    def is_complete(self) -> bool:
        return self.index >= len(QUESTIONS)

    def pending_event(self) -> Optional[Event]:
        """The most recently posed question if it is still unanswered"""
        for event in reversed(self.events):
            if event.kind == EventKind.QUESTION_POSED:
                return None if event.answered else event
        return None

    def pending_question(self) -> Optional[Question]:
        event = self.pending_event()
        if event is None or self.is_complete:
            return None
        return QUESTIONS[self.index]

    def _append(self, kind: EventKind, content: str, question_key: Optional[str] = None) -> Event:
        event = Event(id=len(self.events), kind=kind, content=content, question_key=question_key)
        self.events.append(event)
        return event

    def _notice(self, content: str) -> Event:
        return self._append(EventKind.SYSTEM_NOTICE, content)

    def _transition(self, target: GenerationState):
        if target not in TRANSITIONS[self.generation_state]:
            raise WizardStateError(
                f"Cannot move from {self.generation_state.value} to {target.value}"
            )
        logger.info(f"Session {self.token}: {self.generation_state.value} -> {target.value}")
        self.generation_state = target


def start_session() -> Session:
    """Create a fresh session with the welcome notice and the first question"""
    session = Session(token=next(_session_tokens))
    session._notice(WELCOME_MESSAGE)
    post_next_question(session)
    logger.info(f"Session {session.token} started")
    return session


def reset_session(session: Optional[Session] = None) -> Session:
    """Discard ``session`` entirely and start a new one"""
    if session is not None:
        logger.info(
            f"Session {session.token} reset in state {session.generation_state.value}"
        )
    return start_session()


def post_next_question(session: Session):
    """Post the question at the current index; no-op once all are answered"""
    if session.is_complete:
        return
    question = QUESTIONS[session.index]
    session._append(EventKind.QUESTION_POSED, question.text, question_key=question.key)
    session.staging = [] if question.mode == AnswerMode.MULTI_CHOICE else None


def _normalize_value(question: Question, value: Any) -> Tuple[Any, str]:
    """Validate ``value`` for ``question``; return the stored value and its transcript text"""
    if question.mode == AnswerMode.MULTI_CHOICE:
        if isinstance(value, str) or not isinstance(value, (list, tuple)):
            raise InvalidAnswerValue(f"'{question.key}' expects a list of choices")
        if not value:
            raise EmptyMultiChoice(f"Select at least one option for '{question.key}'")
        selected = list(value)
        for option in selected:
            if option not in question.choices:
                raise InvalidAnswerValue(f"'{option}' is not an option for '{question.key}'")
        if len(set(selected)) != len(selected):
            raise InvalidAnswerValue(f"Duplicate options for '{question.key}'")
        return selected, ", ".join(selected)

    if not isinstance(value, str):
        raise InvalidAnswerValue(f"'{question.key}' expects a single text answer")

    if question.mode == AnswerMode.SINGLE_CHOICE:
        if value not in question.choices:
            raise InvalidAnswerValue(f"'{value}' is not an option for '{question.key}'")
        return value, value

    text = value.strip()
    return text, text or NONE_SPECIFIED


def submit_answer(session: Session, key: str, value: Any) -> Session:
    """Record the answer to the pending question and move the wizard forward.

    Every check runs before anything is mutated, so a rejected answer leaves
    the session exactly as it was.
    """
    event = session.pending_event()
    question = session.pending_question()
    if event is None or question is None:
        raise InvalidAnswerKey(f"No question is waiting for an answer (got '{key}')")
    if key != question.key:
        raise InvalidAnswerKey(f"Pending question is '{question.key}', not '{key}'")

    stored, transcript = _normalize_value(question, value)

    event.mark_answered()
    session._append(EventKind.ANSWER_RECORDED, transcript, question_key=key)
    session.answers[key] = stored
    session.staging = None
    session.index += 1
    logger.info(f"Session {session.token}: answered '{key}' ({session.index}/{len(QUESTIONS)})")

    if session.is_complete:
        session.request = synthesize_request(session.answers)
        session._transition(GenerationState.COMPOSING)
        session._notice(PROMPT_READY_MESSAGE)
    else:
        post_next_question(session)
    return session


def synthesize_request(answers: Dict[str, Any]) -> str:
    """Build the website generation prompt from a complete set of answers"""
    sections = answers.get("sections") or []
    if isinstance(sections, (list, tuple)):
        sections = ", ".join(sections)
    additional = (answers.get("additional_features") or "").strip()

    return WEBSITE_PROMPT_TEMPLATE.format(
        business_type=answers.get("business_type", ""),
        colors=answers.get("colors", ""),
        layout=answers.get("layout", ""),
        style=answers.get("style", ""),
        sections=sections,
        additional_features=additional or NONE_SPECIFIED,
    )


def toggle_multi_choice_selection(staging: Iterable[str], option: str) -> List[str]:
    """Remove ``option`` if selected, otherwise append it"""
    selected = list(staging)
    if option in selected:
        selected.remove(option)
    else:
        selected.append(option)
    return selected


def toggle_selection(session: Session, option: str) -> List[str]:
    """Toggle ``option`` in the staging selection of the pending multi-choice question"""
    question = session.pending_question()
    if question is None or question.mode != AnswerMode.MULTI_CHOICE or session.staging is None:
        raise WizardStateError("No multi-choice question is waiting for a selection")
    if option not in question.choices:
        raise InvalidAnswerValue(f"'{option}' is not an option for '{question.key}'")
    session.staging = toggle_multi_choice_selection(session.staging, option)
    return session.staging


def submit_selection(session: Session) -> Session:
    """Submit the staged selection as the answer to the pending multi-choice question"""
    question = session.pending_question()
    if question is None or question.mode != AnswerMode.MULTI_CHOICE:
        raise WizardStateError("No multi-choice question is waiting for a selection")
    return submit_answer(session, question.key, list(session.staging or []))


def confirm_generation(session: Session) -> Tuple[int, str]:
    """Freeze the synthesized request and mark generation as in flight"""
    if session.generation_state != GenerationState.COMPOSING:
        raise WizardStateError(
            f"Nothing to generate in state {session.generation_state.value}"
        )
    session._transition(GenerationState.PENDING)
    session._notice(GENERATING_MESSAGE)
    return session.token, session.request


def _accepts_settlement(session: Session, token: int) -> bool:
    if token != session.token:
        logger.warning(f"Dropping result for session {token}; current session is {session.token}")
        return False
    if session.generation_state != GenerationState.PENDING:
        logger.warning(
            f"Dropping result for session {token} in state {session.generation_state.value}"
        )
        return False
    return True


def complete_generation(session: Session, token: int, text: str) -> bool:
    """Store the generated website; returns False when the result is stale"""
    if not _accepts_settlement(session, token):
        return False
    if not text or not text.strip():
        return fail_generation(session, token, "The generation service returned an empty website")
    session.artifact = text
    session._transition(GenerationState.SUCCEEDED)
    session._notice(GENERATION_SUCCEEDED_MESSAGE)
    return True


def fail_generation(session: Session, token: int, reason: str) -> bool:
    """Record a failed generation attempt; the request is kept as it was"""
    if not _accepts_settlement(session, token):
        return False
    session.error = reason
    session._transition(GenerationState.FAILED)
    session._notice(GENERATION_FAILED_MESSAGE)
    logger.error(f"Session {session.token}: generation failed: {reason}")
    return True
