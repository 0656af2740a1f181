"""Instruction prompts for each analysis stage."""

import re
from enum import Enum

from langchain_core.prompts import PromptTemplate


class StagePrompt(str, Enum):
    """Stage prompts, keyed by the instruction line that opens them."""

    ANONYMIZE = "Remove all personal identifiers from this feedback"
    SUMMARIZE = "Summarize this student feedback in exactly one clear, concise sentence"
    CLASSIFY = "Classify this student feedback into exactly one category"


ANONYMIZE_TEMPLATE = PromptTemplate.from_template(
    StagePrompt.ANONYMIZE.value
    + """ while keeping the core message intact.
Remove names, ID numbers, specific locations, phone numbers, email addresses, and any personally identifiable information.
Replace them with generic terms like [STUDENT], [TEACHER], [LOCATION], etc.

Original feedback: "{feedback}"

Anonymized feedback:"""
)

SUMMARIZE_TEMPLATE = PromptTemplate.from_template(
    StagePrompt.SUMMARIZE.value
    + """ that captures the main issue or suggestion.
Keep it under 100 characters and make it actionable.

Feedback: "{feedback}"

One-line summary:"""
)

CLASSIFY_TEMPLATE = PromptTemplate.from_template(
    StagePrompt.CLASSIFY.value
    + """: "Academics", "Infrastructure", or "Placement".

- Academics: courses, teaching, exams, curriculum, faculty, learning materials
- Infrastructure: buildings, facilities, wifi, labs, library, hostel, canteen
- Placement: jobs, internships, career guidance, industry connections, recruitment

Feedback: "{feedback}"

Category (respond with exactly one word - Academics, Infrastructure, or Placement):"""
)

_FEEDBACK_BLOCK = re.compile(r'feedback: "(.*)"\n\n', re.IGNORECASE | re.DOTALL)


def build_anonymize_prompt(text: str) -> str:
    return ANONYMIZE_TEMPLATE.format(feedback=text)


def build_summarize_prompt(text: str) -> str:
    return SUMMARIZE_TEMPLATE.format(feedback=text)


def build_classify_prompt(text: str) -> str:
    return CLASSIFY_TEMPLATE.format(feedback=text)


def detect_stage(prompt: str) -> StagePrompt | None:
    """Identify which stage a prompt was built for."""
    for stage in StagePrompt:
        if prompt.startswith(stage.value):
            return stage
    return None


def extract_feedback(prompt: str) -> str:
    """Recover the feedback text embedded in a stage prompt."""
    match = _FEEDBACK_BLOCK.search(prompt)
    return match.group(1) if match else prompt
