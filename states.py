"""Generation lifecycle and FSM states for the dialog"""
from enum import Enum

from aiogram.fsm.state import State, StatesGroup


class GenerationState(str, Enum):
    """Lifecycle of a single generation attempt"""

    IDLE = "idle"  # questions still being answered
    COMPOSING = "composing"  # prompt synthesized, waiting for confirmation
    PENDING = "pending"  # request in flight
    SUCCEEDED = "succeeded"
    FAILED = "failed"


# Allowed lifecycle transitions; everything else is a caller error.
# Leaving SUCCEEDED/FAILED is only possible through a session reset.
TRANSITIONS = {
    GenerationState.IDLE: {GenerationState.COMPOSING},
    GenerationState.COMPOSING: {GenerationState.PENDING},
    GenerationState.PENDING: {GenerationState.SUCCEEDED, GenerationState.FAILED},
    GenerationState.SUCCEEDED: set(),
    GenerationState.FAILED: set(),
}


class WebsiteWizardStates(StatesGroup):
    """Chat states that decide how incoming messages are routed"""

    # Phase 1: answering the fixed question set
    answering_question = State()  # waiting for a button press
    waiting_for_free_text = State()  # waiting for a typed answer

    # Phase 2: prompt review
    confirming_prompt = State()

    # Phase 3: generation
    generating = State()
    finished = State()  # website generated or failed
