"""Core data models for generated tests and their grading."""
from __future__ import annotations

import math
import uuid
from typing import Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, PositiveInt, field_validator, model_validator

OPTION_COUNT = 4

UserAnswers = Dict[str, str]


def percent_score(correct: int, total: int) -> int:
    """Percentage of correct answers rounded half-up; 0 for an empty test."""
    if total <= 0:
        return 0
    return int(math.floor(correct / total * 100 + 0.5))


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class TestSpec(_CamelModel):
    """Parameters describing a quiz to be generated."""

    __test__ = False

    title: str
    description: str = ""
    num_questions: PositiveInt = Field(..., alias="numQuestions")
    difficulty: str = Field(..., description="Free-form level, e.g. easy/medium/hard")
    tags: Union[str, List[str]] = Field(default_factory=list)

    @property
    def tag_text(self) -> str:
        if isinstance(self.tags, str):
            return self.tags
        return ", ".join(self.tags)


class Question(_CamelModel):
    """Multiple-choice question with exactly four distinct options."""

    id: Optional[str] = Field(None, alias="_id")
    text: str
    options: List[str]
    correct_answer: str = Field(..., alias="correctAnswer")

    @field_validator("text")
    def validate_text(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("question text must not be empty")
        return value

    @field_validator("options")
    def validate_options(cls, value: List[str]) -> List[str]:
        if len(value) != OPTION_COUNT:
            raise ValueError(f"questions require exactly {OPTION_COUNT} options")
        if len(set(value)) != len(value):
            raise ValueError("options must be distinct")
        if any(not opt.strip() for opt in value):
            raise ValueError("options must not be blank")
        return value

    @field_validator("correct_answer")
    def validate_correct_answer(cls, value: str, info):
        options = info.data.get("options")
        if options is not None and value not in options:
            raise ValueError("correctAnswer must match one of the options")
        return value


class Test(_CamelModel):
    """A generated test; question ids are assigned when missing."""

    __test__ = False

    id: Optional[str] = Field(None, alias="_id")
    title: str = ""
    description: str = ""
    difficulty: str = ""
    tags: Union[str, List[str]] = Field(default_factory=list)
    questions: List[Question] = Field(default_factory=list)

    @model_validator(mode="after")
    def assign_question_ids(self) -> "Test":
        for question in self.questions:
            if not question.id:
                question.id = uuid.uuid4().hex
        ids = [q.id for q in self.questions]
        if len(set(ids)) != len(ids):
            raise ValueError("question ids must be unique within a test")
        return self


class QuestionResult(_CamelModel):
    is_correct: bool = Field(..., alias="isCorrect")
    explanation: str = ""


class AnalysisResult(_CamelModel):
    """Structured grading output, produced remotely or locally."""

    score: int = Field(..., ge=0, le=100)
    correct_answers: int = Field(..., ge=0, alias="correctAnswers")
    wrong_answers: int = Field(..., ge=0, alias="wrongAnswers")
    analysis: str = ""
    question_results: List[QuestionResult] = Field(default_factory=list, alias="questionResults")

    @model_validator(mode="after")
    def validate_counts(self) -> "AnalysisResult":
        total = len(self.question_results)
        if self.correct_answers + self.wrong_answers != total:
            raise ValueError(
                f"correctAnswers + wrongAnswers must equal {total} question results"
            )
        flagged = sum(1 for result in self.question_results if result.is_correct)
        if flagged != self.correct_answers:
            raise ValueError(
                f"correctAnswers is {self.correct_answers} but {flagged} results are marked correct"
            )
        expected = percent_score(self.correct_answers, total)
        if self.score != expected:
            raise ValueError(f"score {self.score} does not match {expected}% correct")
        return self
