"""Schema validation for JSON recovered from completions."""
from __future__ import annotations

from typing import Any, List

from pydantic import ValidationError as PydanticValidationError

from .models import AnalysisResult, Question, Test


class ValidationError(Exception):
    """Raised when recovered JSON parses but does not fit the expected schema."""


def _describe(exc: PydanticValidationError) -> str:
    messages = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()))
        messages.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))
    return "; ".join(messages)


def validate_questions(payload: Any) -> List[Question]:
    """Validate a parsed question array (4 distinct options, answer among them)."""
    if not isinstance(payload, list):
        raise ValidationError("questions payload must be a JSON array")
    if not payload:
        raise ValidationError("questions payload is empty")

    questions: List[Question] = []
    errors: List[str] = []
    for idx, item in enumerate(payload, start=1):
        if not isinstance(item, dict):
            errors.append(f"Question {idx}: expected an object")
            continue
        try:
            questions.append(Question.model_validate(item))
        except PydanticValidationError as exc:
            errors.append(f"Question {idx}: {_describe(exc)}")
    if errors:
        raise ValidationError("; ".join(errors))
    return questions


def validate_analysis(payload: Any, test: Test) -> AnalysisResult:
    """Validate a parsed analysis object against the graded test."""
    if not isinstance(payload, dict):
        raise ValidationError("analysis payload must be a JSON object")
    try:
        result = AnalysisResult.model_validate(payload)
    except PydanticValidationError as exc:
        raise ValidationError(_describe(exc)) from exc

    if len(result.question_results) != len(test.questions):
        raise ValidationError(
            f"questionResults has {len(result.question_results)} entries "
            f"for {len(test.questions)} questions"
        )
    return result
