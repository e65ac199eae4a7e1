"""Recover JSON values from free-text completions.

Completions are asked for bare JSON but sometimes arrive wrapped in a
markdown fence or surrounded by prose. Recovery is two explicit steps:

1. strip a fence surrounding the whole text and parse it;
2. slice from the first opening bracket to the last closing bracket of the
   expected kind and parse that.
"""
from __future__ import annotations

import json
import logging
import re
from typing import Any, Optional

logger = logging.getLogger(__name__)

FENCE_OPENER = re.compile(r"\A```(?:json)?[ \t]*\n?")
FENCE_CLOSER = re.compile(r"\n?```\Z")

BRACKETS = {"array": ("[", "]"), "object": ("{", "}")}
EXPECTED_TYPES = {"array": list, "object": dict}


class ParseError(ValueError):
    """Raised when no JSON value of the expected shape can be recovered."""

    def __init__(self, message: str, raw_text: str):
        super().__init__(message)
        self.raw_text = raw_text


def strip_fence(text: str) -> str:
    """Remove a fence surrounding the whole text; inner backticks are kept."""
    stripped = FENCE_OPENER.sub("", text.strip(), count=1)
    return FENCE_CLOSER.sub("", stripped, count=1).strip()


def _matches(value: Any, expect: Optional[str]) -> bool:
    if expect is None:
        return True
    return isinstance(value, EXPECTED_TYPES[expect])


def _parse_direct(text: str) -> Any:
    return json.loads(strip_fence(text))


def _parse_bracket_slice(text: str, expect: Optional[str]) -> Any:
    if expect is None:
        starts = [idx for idx in (text.find("["), text.find("{")) if idx != -1]
        if not starts:
            raise ValueError("no opening bracket found")
        opener = text[min(starts)]
        expect = "array" if opener == "[" else "object"
    opener, closer = BRACKETS[expect]
    start = text.find(opener)
    end = text.rfind(closer)
    if start == -1 or end == -1 or end <= start:
        raise ValueError(f"response did not contain a JSON {expect}")
    return json.loads(text[start : end + 1])


def extract_json(text: str, expect: Optional[str] = None) -> Any:
    """Parse ``text`` as JSON, falling back to a bracket slice.

    ``expect`` is ``"array"``, ``"object"`` or ``None`` (accept either,
    slicing from whichever bracket comes first).
    """

    if expect is not None and expect not in BRACKETS:
        raise ValueError(f"expect must be one of {sorted(BRACKETS)} or None")

    raw_text = text or ""
    try:
        value = _parse_direct(raw_text)
        if _matches(value, expect):
            return value
        logger.warning("Parsed JSON is not an %s; slicing the expected %s out of it", expect, expect)
    except json.JSONDecodeError:
        pass

    try:
        value = _parse_bracket_slice(raw_text.strip(), expect)
    except ValueError as exc:
        logger.debug("Bracket slice recovery failed: %s", exc)
        raise ParseError(f"Could not recover JSON {expect or 'value'}: {exc}", raw_text) from exc

    if not _matches(value, expect):
        raise ParseError(f"Recovered JSON is not an {expect}", raw_text)
    return value
