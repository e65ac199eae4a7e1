"""FastAPI application exposing test generation, grading and the dashboard."""
from __future__ import annotations

import json
import logging
import os
import uuid
from pathlib import Path
from typing import Any, Dict, Optional

from fastapi import Depends, FastAPI, HTTPException, Query, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates
from pydantic import BaseModel, Field

from .analysis import analyze_with_fallback
from .components import TEAM, UserProfile, build_user_card
from .llm import build_default_llm_client
from .models import Test, TestSpec
from .questions import GenerationError, generate_questions
from .storage import JsonStorage

logger = logging.getLogger(__name__)

TESTS = "tests"
RESULTS = "results"


class SubmissionRequest(BaseModel):
    answers: Dict[str, str] = Field(default_factory=dict)


def _templates() -> Jinja2Templates:
    root = Path(__file__).parent / "templates"
    return Jinja2Templates(directory=str(root))


class AppSettings(BaseModel):
    """App-level configuration loaded from env or config file."""

    auth_token: str | None = None
    auth_password: str | None = None


def _load_settings(config_path: str | Path | None = None) -> AppSettings:
    config_payload: Dict[str, Any] = {}
    if config_path:
        try:
            config_payload = json.loads(Path(config_path).read_text())
        except FileNotFoundError:
            config_payload = {}

    return AppSettings(
        auth_token=os.getenv("QUIZCRAFT_AUTH_TOKEN") or config_payload.get("auth_token"),
        auth_password=os.getenv("QUIZCRAFT_AUTH_PASSWORD")
        or config_payload.get("auth_password"),
    )


def _resolve_llm_client(llm_client):
    if llm_client is not None:
        return llm_client
    try:
        return build_default_llm_client()
    except EnvironmentError as exc:
        logger.warning("Completion client disabled: %s", exc)
        return None


def _load_or_404(storage: JsonStorage, kind: str, record_id: str) -> Dict[str, Any]:
    try:
        return storage.load(kind, record_id)
    except FileNotFoundError:
        raise HTTPException(status_code=404, detail=f"Unknown {kind[:-1]}: {record_id}")


def create_app(
    storage_dir: str | Path = "./data", llm_client=None, config_path: str | Path | None = None
) -> FastAPI:
    storage = JsonStorage(Path(storage_dir))
    settings = _load_settings(config_path)
    client = _resolve_llm_client(llm_client)
    app = FastAPI(title="quizcraft", version="0.1.0")
    templates = _templates()

    def get_settings():
        return settings

    def require_auth(
        request: Request,  # noqa: ARG001 - FastAPI injects
        config: AppSettings = Depends(get_settings),
    ):
        if not config.auth_token and not config.auth_password:
            return

        token_header = request.headers.get("X-Auth-Token")
        password_header = request.headers.get("X-Auth-Password")

        if config.auth_token and token_header == config.auth_token:
            return
        if config.auth_password and password_header == config.auth_password:
            return
        raise HTTPException(status_code=401, detail="Unauthorized")

    auth = Depends(require_auth)

    @app.get("/health")
    def health():
        return {"status": "ok", "llm_configured": client is not None}

    @app.get("/", response_class=HTMLResponse)
    def dashboard(
        request: Request,
        _auth=auth,
        name: Optional[str] = Query(None),
        email: Optional[str] = Query(None),
        role: Optional[str] = Query(None),
    ):
        profile = UserProfile(name=name, email=email or "", role=role or "") if name else None
        return templates.TemplateResponse(
            request,
            "dashboard.html",
            {"card": build_user_card(profile), "team": TEAM},
        )

    @app.post("/tests")
    def create_test(spec: TestSpec, _auth=auth):
        if client is None:
            raise HTTPException(status_code=503, detail="Question generation is not configured")
        try:
            questions = generate_questions(spec, client)
        except GenerationError as exc:
            raise HTTPException(status_code=502, detail=str(exc))

        test = Test(
            id=uuid.uuid4().hex,
            title=spec.title,
            description=spec.description,
            difficulty=spec.difficulty,
            tags=spec.tags,
            questions=questions,
        )
        payload = test.model_dump(by_alias=True)
        storage.save(TESTS, test.id, payload)
        return payload

    @app.get("/tests/{test_id}")
    def get_test(test_id: str, _auth=auth):
        return _load_or_404(storage, TESTS, test_id)

    @app.post("/tests/{test_id}/submissions")
    def submit_answers(test_id: str, submission: SubmissionRequest, _auth=auth):
        test = Test.model_validate(_load_or_404(storage, TESTS, test_id))
        if not test.questions:
            raise HTTPException(status_code=400, detail="Test has no questions")

        outcome = analyze_with_fallback(test, submission.answers, client)
        result_id = uuid.uuid4().hex
        record: Dict[str, Any] = {
            "result_id": result_id,
            "test_id": test_id,
            "answers": submission.answers,
            "fallback_used": outcome.fallback_used,
            "warnings": outcome.warnings,
            "result": outcome.result.model_dump(by_alias=True),
        }
        storage.save(RESULTS, result_id, record)
        return record

    @app.get("/results/{result_id}")
    def get_result(result_id: str, _auth=auth):
        return _load_or_404(storage, RESULTS, result_id)

    return app
