"""The fixed question set of the website wizard"""
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Tuple


class AnswerMode(str, Enum):
    """How a question is answered"""

    SINGLE_CHOICE = "single"
    MULTI_CHOICE = "multi"
    FREE_TEXT = "free_text"


@dataclass(frozen=True)
class Question:
    """A question that fills one preference field"""

    key: str
    text: str
    mode: AnswerMode
    choices: Tuple[str, ...] = ()


QUESTIONS: Tuple[Question, ...] = (
    Question(
        key="business_type",
        text="What type of business or website is this for?",
        mode=AnswerMode.SINGLE_CHOICE,
        choices=("Restaurant", "Tech Startup", "Portfolio", "E-commerce", "Blog", "Agency", "Other"),
    ),
    Question(
        key="colors",
        text="What color scheme would you prefer?",
        mode=AnswerMode.SINGLE_CHOICE,
        choices=(
            "Blue & White", "Dark & Modern", "Warm & Earthy",
            "Bright & Colorful", "Minimalist Gray", "Custom",
        ),
    ),
    Question(
        key="layout",
        text="What layout style do you prefer?",
        mode=AnswerMode.SINGLE_CHOICE,
        choices=("Single Page", "Multi-section Landing", "Grid-based", "Sidebar Navigation", "Full-width Hero"),
    ),
    Question(
        key="sections",
        text="Which sections should your website include?",
        mode=AnswerMode.MULTI_CHOICE,
        choices=(
            "Header/Navigation", "Hero Section", "About Us", "Services/Products",
            "Testimonials", "Contact Form", "Footer",
        ),
    ),
    Question(
        key="style",
        text="What overall style are you aiming for?",
        mode=AnswerMode.SINGLE_CHOICE,
        choices=("Professional", "Creative", "Modern", "Classic", "Playful", "Elegant"),
    ),
    Question(
        key="additional_features",
        text="Any additional features or specific requirements?",
        mode=AnswerMode.FREE_TEXT,
    ),
)


def empty_answers() -> Dict[str, Any]:
    """Default answers: empty string, or empty list for multi-choice"""
    return {
        q.key: [] if q.mode == AnswerMode.MULTI_CHOICE else ""
        for q in QUESTIONS
    }
