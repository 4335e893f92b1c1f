import os
import sys
from pathlib import Path

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

# config refuses to import without these
os.environ.setdefault("BOT_TOKEN", "123456:TEST-TOKEN")
os.environ.setdefault("OPENAI_API_KEY", "sk-test")

from questions import QUESTIONS  # noqa: E402

RESTAURANT_ANSWERS = {
    "business_type": "Restaurant",
    "colors": "Blue & White",
    "layout": "Single Page",
    "sections": ["Hero Section", "Contact Form"],
    "style": "Professional",
    "additional_features": "",
}


@pytest.fixture
def restaurant_answers():
    return dict(RESTAURANT_ANSWERS, sections=list(RESTAURANT_ANSWERS["sections"]))


def answer_all(submit, answers=RESTAURANT_ANSWERS):
    """Answer every question in order through ``submit(key, value)``"""
    for question in QUESTIONS:
        submit(question.key, answers[question.key])
