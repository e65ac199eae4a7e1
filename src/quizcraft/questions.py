"""Question generation through the completion service."""
from __future__ import annotations

import logging
from typing import List

from .extraction import ParseError, extract_json
from .llm import LLMClient
from .models import Question, TestSpec
from .validation import ValidationError, validate_questions

logger = logging.getLogger(__name__)


class GenerationError(Exception):
    """Raised when the service yields no usable question array."""


def build_generation_prompt(spec: TestSpec) -> str:
    return (
        f"Generate {spec.num_questions} multiple-choice questions for a {spec.difficulty} "
        f"level test on {spec.tag_text}.\n"
        f'The test title is "{spec.title}" and the description is "{spec.description}".\n'
        "For each question, provide the following details:\n"
        "- 'text': The question text as a string.\n"
        "- 'options': An array of 4 distinct answer options (as strings).\n"
        "- 'correctAnswer': The correct answer as a string, matching one of the options.\n\n"
        "Format the response as a JSON array of objects, each containing 'text', 'options', "
        "and 'correctAnswer'.\n"
        "Do not include any markdown formatting or additional text outside of the JSON array."
    )


def generate_questions(spec: TestSpec, llm_client: LLMClient) -> List[Question]:
    """Generate questions with a single completion request (no retry)."""

    prompt = build_generation_prompt(spec)
    raw_text = ""
    try:
        raw_text = llm_client.generate_text(prompt)
        payload = extract_json(raw_text, expect="array")
        questions = validate_questions(payload)
    except (ParseError, ValidationError) as exc:
        logger.error("Failed to generate questions: %s", exc)
        logger.error("Raw response: %s", raw_text)
        raise GenerationError(f"Failed to generate questions: {exc}") from exc
    except Exception as exc:  # noqa: BLE001 - any service failure is a generation failure
        logger.error("Failed to generate questions: %s", exc)
        if raw_text:
            logger.error("Raw response: %s", raw_text)
        raise GenerationError("Failed to generate questions") from exc

    if len(questions) != spec.num_questions:
        logger.warning(
            "Requested %s questions but the service returned %s", spec.num_questions, len(questions)
        )
    return questions
