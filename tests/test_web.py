import json

import pytest
from fastapi.testclient import TestClient

from quizcraft.analysis import LOCAL_ANALYSIS_NOTE
from quizcraft.web import create_app

QUESTIONS = [
    {"text": "2 + 2?", "options": ["3", "4", "5", "22"], "correctAnswer": "4"},
    {"text": "3 + 3?", "options": ["6", "7", "8", "9"], "correctAnswer": "6"},
]

SPEC = {
    "title": "Arithmetic",
    "description": "Sums",
    "numQuestions": 2,
    "difficulty": "easy",
    "tags": ["math"],
}


@pytest.fixture(autouse=True)
def _no_env_credentials(monkeypatch):
    for name in ("GEMINI_API_KEY", "GOOGLE_API_KEY", "QUIZCRAFT_AUTH_TOKEN", "QUIZCRAFT_AUTH_PASSWORD"):
        monkeypatch.delenv(name, raising=False)


def _create_test(client):
    response = client.post("/tests", json=SPEC)
    assert response.status_code == 200
    return response.json()


def test_health_endpoint(tmp_path):
    client = TestClient(create_app(storage_dir=tmp_path))
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok", "llm_configured": False}


def test_dashboard_renders_loading_card_and_team(tmp_path):
    client = TestClient(create_app(storage_dir=tmp_path))

    html = client.get("/").text

    assert "Loading ..." in html
    assert "Our Team" in html
    assert "Sameer Sahu" in html
    assert "Full Stack Developer" in html


def test_dashboard_renders_user_details(tmp_path):
    client = TestClient(create_app(storage_dir=tmp_path))

    html = client.get("/", params={"name": "Ada", "email": "ada@example.com", "role": "student"}).text

    assert "Ada&#39;s Dashboard" in html
    assert "ada@example.com" in html
    assert "Loading ..." not in html


def test_create_test_generates_and_persists(tmp_path, fake_llm):
    llm = fake_llm(json.dumps(QUESTIONS))
    client = TestClient(create_app(storage_dir=tmp_path, llm_client=llm))

    created = _create_test(client)

    assert created["title"] == "Arithmetic"
    assert len(created["questions"]) == 2
    assert all(q["_id"] for q in created["questions"])
    assert "Generate 2 multiple-choice questions" in llm.prompts[0]

    detail = client.get(f"/tests/{created['_id']}")
    assert detail.status_code == 200
    assert detail.json() == created


def test_create_test_without_client_is_unavailable(tmp_path):
    client = TestClient(create_app(storage_dir=tmp_path))

    resp = client.post("/tests", json=SPEC)

    assert resp.status_code == 503


def test_create_test_maps_generation_error(tmp_path, fake_llm):
    client = TestClient(create_app(storage_dir=tmp_path, llm_client=fake_llm("no questions today")))

    resp = client.post("/tests", json=SPEC)

    assert resp.status_code == 502


def test_unknown_test_returns_404(tmp_path):
    client = TestClient(create_app(storage_dir=tmp_path))

    assert client.get("/tests/missing").status_code == 404
    assert client.post("/tests/missing/submissions", json={"answers": {}}).status_code == 404


def test_submission_falls_back_to_local_grading(monkeypatch, tmp_path, fake_llm):
    sleep_calls = []
    monkeypatch.setattr("time.sleep", lambda secs: sleep_calls.append(secs))
    failures = [RuntimeError("overloaded") for _ in range(3)]
    llm = fake_llm(json.dumps(QUESTIONS), *failures)
    client = TestClient(create_app(storage_dir=tmp_path, llm_client=llm))
    created = _create_test(client)
    first, second = (q["_id"] for q in created["questions"])

    resp = client.post(
        f"/tests/{created['_id']}/submissions", json={"answers": {first: "4", second: "7"}}
    )

    assert sleep_calls == [0.5, 1.0]
    assert resp.status_code == 200
    body = resp.json()
    assert body["fallback_used"] is True
    assert body["result"]["score"] == 50
    assert body["result"]["analysis"] == LOCAL_ANALYSIS_NOTE
    assert body["result"]["questionResults"][1]["explanation"] == "Incorrect. Correct answer: 6"

    stored = client.get(f"/results/{body['result_id']}")
    assert stored.json() == body


def test_token_auth_dependency(monkeypatch, tmp_path):
    monkeypatch.setenv("QUIZCRAFT_AUTH_TOKEN", "secret")
    client = TestClient(create_app(storage_dir=tmp_path))

    assert client.get("/").status_code == 401
    assert client.get("/", headers={"X-Auth-Token": "secret"}).status_code == 200
    assert client.get("/health").status_code == 200


def test_password_auth_from_config_file(tmp_path):
    config = tmp_path / "config.json"
    config.write_text(json.dumps({"auth_password": "pw"}))
    client = TestClient(create_app(storage_dir=tmp_path / "data", config_path=config))

    assert client.get("/tests/any").status_code == 401
    assert client.get("/tests/any", headers={"X-Auth-Password": "pw"}).status_code == 404
