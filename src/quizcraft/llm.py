"""Completion client for Gemini text generation."""
from __future__ import annotations

import logging
import os
from typing import Any, Dict, List

import httpx
from pydantic import BaseModel

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com"
DEFAULT_MODEL = "models/gemini-1.5-flash"


class LLMSettings(BaseModel):
    """Connection settings supplied by the caller at startup."""

    api_key: str
    base_url: str = DEFAULT_BASE_URL
    model: str = DEFAULT_MODEL
    timeout: float = 30.0


class LLMClient:
    """Minimal HTTP client wrapper for the Gemini generateContent endpoint."""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        model: str = DEFAULT_MODEL,
        client: httpx.Client | None = None,
        timeout: float = 30.0,
    ):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.model = model
        self._client = client or httpx.Client(timeout=timeout)
        self._owns_client = client is None

    @classmethod
    def from_settings(cls, settings: LLMSettings, client: httpx.Client | None = None) -> "LLMClient":
        return cls(
            base_url=settings.base_url,
            api_key=settings.api_key,
            model=settings.model,
            client=client,
            timeout=settings.timeout,
        )

    def generate_text(self, prompt: str) -> str:
        """Send a single completion request and return the response text.

        No retries happen here; ``httpx.HTTPStatusError`` carries the status
        code (503 when the service is overloaded) for callers that retry.
        """

        url = f"{self.base_url}/v1beta/{self.model}:generateContent"
        payload = {"contents": [{"parts": [{"text": prompt}]}]}
        headers = {"X-Goog-Api-Key": self.api_key}
        response = self._client.post(url, json=payload, headers=headers)
        response.raise_for_status()
        return self._extract_text(response.json())

    def _extract_text(self, data: Dict[str, Any]) -> str:
        candidates = data.get("candidates")
        if not isinstance(candidates, list) or not candidates:
            feedback = data.get("promptFeedback")
            if feedback:
                logger.warning("Completion blocked: %s", feedback)
            raise ValueError("LLM response did not include any candidates")
        parts = (candidates[0].get("content") or {}).get("parts")
        if not isinstance(parts, list) or not parts:
            raise ValueError("LLM response missing content parts")
        texts: List[str] = [part["text"] for part in parts if isinstance(part.get("text"), str)]
        if not texts:
            raise ValueError("LLM response missing content.parts[].text")
        return "".join(texts)

    def close(self):
        if self._owns_client:
            self._client.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()


def load_llm_settings() -> LLMSettings:
    """Read completion settings from the environment."""

    api_key = os.getenv("GEMINI_API_KEY") or os.getenv("GOOGLE_API_KEY")
    if not api_key:
        raise EnvironmentError("GEMINI_API_KEY is required to build the default LLM client")
    return LLMSettings(
        api_key=api_key,
        base_url=os.getenv("QUIZCRAFT_LLM_BASE_URL") or DEFAULT_BASE_URL,
        model=os.getenv("QUIZCRAFT_LLM_MODEL") or DEFAULT_MODEL,
    )


def build_default_llm_client(*, base_url: str | None = None, model: str | None = None) -> LLMClient:
    """Create an LLM client from env settings; explicit arguments win."""

    settings = load_llm_settings()
    if base_url:
        settings.base_url = base_url
    if model:
        settings.model = model
    return LLMClient.from_settings(settings)
