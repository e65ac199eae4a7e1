"""Grading of submitted answers, remotely via the LLM or locally.

``analyze_remote`` and ``analyze_local`` produce the same ``AnalysisResult``
contract. Choosing between them is the caller's job; ``analyze_with_fallback``
is the composition the web layer uses.
"""
from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from .extraction import ParseError, extract_json
from .llm import LLMClient
from .models import AnalysisResult, QuestionResult, Test, UserAnswers, percent_score
from .validation import ValidationError, validate_analysis

logger = logging.getLogger(__name__)

MAX_ATTEMPTS = 3
BACKOFF_SECONDS = 0.5
LOCAL_ANALYSIS_NOTE = (
    "Automated local verification used due to AI unavailability. "
    "Results are based on stored correct answers."
)


class AnalysisError(Exception):
    """Raised when remote grading cannot produce a valid result."""


def build_analysis_prompt(test: Test, answers: UserAnswers) -> str:
    test_json = json.dumps(test.model_dump(by_alias=True), ensure_ascii=False)
    answers_json = json.dumps(dict(answers), ensure_ascii=False)
    return f"""Analyze the following test results:
Test: {test_json}
User Answers: {answers_json}

Please provide:
1. The score (percentage of correct answers)
2. Number of correct answers
3. Number of wrong answers
4. A brief analysis of the user's performance, including topics they need to improve
5. For each question, in the order of the test, provide:
   - Whether the user's answer was correct or not
   - A brief explanation of why it was correct or incorrect

Format the response as a JSON object with the following structure:
{{
  "score": number,
  "correctAnswers": number,
  "wrongAnswers": number,
  "analysis": string,
  "questionResults": [
    {{
      "isCorrect": boolean,
      "explanation": string
    }},
    ...
  ]
}}
"""


def _request_with_retries(
    llm_client: LLMClient,
    prompt: str,
    *,
    max_attempts: int,
    backoff: float,
    sleep: Callable[[float], None],
) -> str:
    last_exc: Exception | None = None
    for attempt in range(1, max_attempts + 1):
        try:
            return llm_client.generate_text(prompt)
        except Exception as exc:  # noqa: BLE001 - every failure is retried
            last_exc = exc
            status = getattr(getattr(exc, "response", None), "status_code", None)
            logger.warning(
                "Analysis request failed (attempt %s/%s, status %s): %s",
                attempt,
                max_attempts,
                status or "unknown",
                exc,
            )
            if attempt < max_attempts:
                sleep(backoff * attempt)

    raise AnalysisError(f"Analysis failed after {max_attempts} attempts") from last_exc


def analyze_remote(
    test: Test,
    answers: UserAnswers,
    llm_client: LLMClient,
    *,
    max_attempts: int = MAX_ATTEMPTS,
    backoff: float = BACKOFF_SECONDS,
    sleep: Optional[Callable[[float], None]] = None,
) -> AnalysisResult:
    """Grade answers through the completion service.

    Up to ``max_attempts`` requests are made, sleeping ``backoff * attempt``
    seconds after each failed one. After the last failure an
    ``AnalysisError`` is raised with the final error as its cause.
    """

    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")
    sleep = sleep or time.sleep

    prompt = build_analysis_prompt(test, answers)
    analysis_text = _request_with_retries(
        llm_client, prompt, max_attempts=max_attempts, backoff=backoff, sleep=sleep
    )
    logger.debug("Analysis response: %s", analysis_text)

    try:
        payload = extract_json(analysis_text, expect="object")
        return validate_analysis(payload, test)
    except (ParseError, ValidationError) as exc:
        logger.error("Failed to parse analysis response: %s", exc)
        logger.error("Raw response: %s", analysis_text)
        raise AnalysisError(f"Failed to verify test results: {exc}") from exc


def analyze_local(test: Test, answers: UserAnswers) -> AnalysisResult:
    """Grade answers against the stored correct answers, no network involved."""

    question_results: List[QuestionResult] = []
    for question in test.questions:
        is_correct = answers.get(question.id) == question.correct_answer
        explanation = (
            "Correct." if is_correct else f"Incorrect. Correct answer: {question.correct_answer}"
        )
        question_results.append(QuestionResult(is_correct=is_correct, explanation=explanation))

    correct = sum(1 for result in question_results if result.is_correct)
    return AnalysisResult(
        score=percent_score(correct, len(question_results)),
        correct_answers=correct,
        wrong_answers=len(question_results) - correct,
        analysis=LOCAL_ANALYSIS_NOTE,
        question_results=question_results,
    )


@dataclass
class GradingOutcome:
    result: AnalysisResult
    fallback_used: bool
    warnings: List[str] = field(default_factory=list)


def analyze_with_fallback(
    test: Test,
    answers: UserAnswers,
    llm_client: Optional[LLMClient] = None,
    **remote_options,
) -> GradingOutcome:
    """Try remote grading first and fall back to local grading on failure."""

    warnings: List[str] = []
    if llm_client is not None:
        try:
            result = analyze_remote(test, answers, llm_client, **remote_options)
            return GradingOutcome(result=result, fallback_used=False, warnings=warnings)
        except AnalysisError as exc:
            cause = exc.__cause__
            detail = f"{exc} ({cause})" if cause else str(exc)
            logger.warning("Remote analysis unavailable, using local grading: %s", detail)
            warnings.append(f"Remote analysis failed: {detail}")
    else:
        warnings.append("No completion client configured")

    return GradingOutcome(result=analyze_local(test, answers), fallback_used=True, warnings=warnings)
