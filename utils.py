"""Formatting and export helpers"""
import logging
from datetime import datetime
from pathlib import Path
from typing import Iterable, List, Optional, Tuple

import config
from questions import AnswerMode, Question
from templates import FREE_TEXT_HINT, MULTI_CHOICE_HINT
from wizard import Event, EventKind

logger = logging.getLogger(__name__)

EVENT_PREFIXES = {
    EventKind.QUESTION_POSED: "❓",
    EventKind.ANSWER_RECORDED: "👤",
    EventKind.SYSTEM_NOTICE: "🤖",
}


def format_question(question: Question, position: int, total: int) -> str:
    """Text of a question message"""
    text = f"❓ ({position}/{total}) {question.text}"
    if question.mode == AnswerMode.MULTI_CHOICE:
        text += f"\n\n{MULTI_CHOICE_HINT}"
    elif question.mode == AnswerMode.FREE_TEXT:
        text += f"\n\n{FREE_TEXT_HINT}"
    return text


def make_callback_data(action: str, token: int, *args: int) -> str:
    """Callback data bound to a session, e.g. ``opt:7:3:1``"""
    return ":".join([action, str(token)] + [str(arg) for arg in args])


def parse_callback_data(data: str) -> Tuple[str, int, List[int]]:
    """Split callback data into action, session token and integer arguments"""
    action, token, *args = data.split(":")
    return action, int(token), [int(arg) for arg in args]


def render_transcript(events: Iterable[Event]) -> str:
    """Rebuild the visible conversation from session events"""
    lines = []
    for event in events:
        prefix = EVENT_PREFIXES[event.kind]
        line = f"{prefix} {event.content}"
        if event.kind == EventKind.QUESTION_POSED and not event.answered:
            line += " (waiting for answer)"
        lines.append(line)
    return "\n\n".join(lines)


def split_message(text: str, limit: Optional[int] = None) -> List[str]:
    """Split text into chunks that fit into one chat message, preferring line breaks"""
    limit = limit or config.MAX_MESSAGE_LENGTH
    chunks = []
    rest = text

    while len(rest) > limit:
        cut = rest.rfind('\n', 0, limit)
        if cut <= 0:
            cut = limit
        chunks.append(rest[:cut])
        rest = rest[cut:].lstrip('\n')

    if rest or not chunks:
        chunks.append(rest)
    return chunks


def create_export_file(html: str, user_id: int) -> str:
    """Write the generated website to an HTML file for download"""
    exports_dir = Path(config.EXPORT_DIR)
    exports_dir.mkdir(parents=True, exist_ok=True)

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    filename = exports_dir / f"website_{user_id}_{timestamp}.html"

    with open(filename, 'w', encoding='utf-8') as f:
        f.write(html)

    logger.info(f"Created export file: {filename}")
    return str(filename)
