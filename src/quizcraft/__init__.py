"""Quizcraft package initialization."""

from .analysis import (  # noqa: F401
    AnalysisError,
    GradingOutcome,
    analyze_local,
    analyze_remote,
    analyze_with_fallback,
)
from .extraction import ParseError, extract_json  # noqa: F401
from .llm import LLMClient, LLMSettings, build_default_llm_client  # noqa: F401
from .models import AnalysisResult, Question, Test, TestSpec  # noqa: F401
from .questions import GenerationError, generate_questions  # noqa: F401
from .validation import ValidationError  # noqa: F401
from .web import create_app  # noqa: F401

__all__ = [
    "AnalysisError",
    "GradingOutcome",
    "analyze_local",
    "analyze_remote",
    "analyze_with_fallback",
    "ParseError",
    "extract_json",
    "LLMClient",
    "LLMSettings",
    "build_default_llm_client",
    "AnalysisResult",
    "Question",
    "Test",
    "TestSpec",
    "GenerationError",
    "generate_questions",
    "ValidationError",
    "create_app",
]
