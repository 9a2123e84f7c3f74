from __future__ import annotations

import sys

from fastapi.testclient import TestClient

from swimcore.services.pool_math import body_distance


def _reset_runtime_caches():
    from swimcore.config import get_settings

    get_settings.cache_clear()


def _purge_api_modules() -> None:
    for name in [
        "api.main",
        "api.routes",
        "api.deps",
        "api.ratelimit",
    ]:
        sys.modules.pop(name, None)


def _build_client(monkeypatch, env_overrides: dict[str, str] | None = None) -> TestClient:
    monkeypatch.setenv("APP_ENV", "test")
    monkeypatch.setenv("CORS_ORIGINS", "http://localhost:5173")
    if env_overrides:
        for key, value in env_overrides.items():
            monkeypatch.setenv(key, value)

    _reset_runtime_caches()
    _purge_api_modules()

    from api.main import create_app

    return TestClient(create_app())


def test_health_echoes_or_generates_request_id_header(monkeypatch):
    with _build_client(monkeypatch) as client:
        custom_request_id = "req-test-123"
        resp = client.get("/api/v1/health", headers={"X-Request-ID": custom_request_id})
        assert resp.status_code == 200, resp.text
        assert resp.headers["X-Request-ID"] == custom_request_id
        assert resp.json() == {"status": "ok", "catalog_version": "2", "app_env": "test"}

        generated = client.get("/api/v1/health")
        assert generated.status_code == 200, generated.text
        assert generated.headers.get("X-Request-ID")


def test_generate_workout_returns_sections_and_footer(monkeypatch):
    with _build_client(monkeypatch) as client:
        resp = client.post("/api/v1/generate-workout", json={"distance": 2000, "seed": 42})
        assert resp.status_code == 200, resp.text
        data = resp.json()
        assert data["total_distance"] == 2000
        assert data["total_lengths"] == 80
        assert data["pool"] == {"length": 25, "units": "m", "label": "25m"}
        assert data["sections"][0]["label"] == "Warm up"
        assert data["sections"][-1]["label"] == "Cool down"
        assert sum(s["target_distance"] for s in data["sections"]) == 2000
        for section in data["sections"]:
            assert body_distance(section["body"]) == section["target_distance"]
        assert len(data["section_meta"]) == len(data["sections"])
        assert "fallback_sections" in data["workout_meta"]
        assert "Total distance: 2000m (pool: 25m)" in data["text"]
        assert data["fingerprint"]

        again = client.post("/api/v1/generate-workout", json={"distance": 2000, "seed": 42})
        assert again.json()["text"] == data["text"]


def test_generate_workout_custom_pool_and_pace(monkeypatch):
    payload = {
        "distance": 1500,
        "seed": 9,
        "pool": {"pool": "custom", "custom_length": 20, "custom_unit": "yards"},
        "options": {"threshold_pace": "1:35", "include_kick": False},
    }
    with _build_client(monkeypatch) as client:
        resp = client.post("/api/v1/generate-workout", json=payload)
        assert resp.status_code == 200, resp.text
        data = resp.json()
        assert data["pool"]["label"] == "20yd custom"
        assert data["total_distance"] == 1520
        assert data["estimated_seconds"] > 0
        assert "Est total time:" in data["text"]


def test_generate_workout_rejects_bad_input(monkeypatch):
    with _build_client(monkeypatch) as client:
        short = client.post("/api/v1/generate-workout", json={"distance": 500})
        assert short.status_code == 422
        assert short.json()["detail"]["code"] == "DISTANCE_OUT_OF_RANGE"

        zero = client.post("/api/v1/generate-workout", json={"distance": 0})
        assert zero.status_code == 422
        assert zero.json()["detail"]["code"] == "VALIDATION_ERROR"
        assert zero.json()["detail"]["errors"][0]["field"] == "distance"

        no_length = client.post("/api/v1/generate-workout", json={"distance": 2000, "pool": {"pool": "custom"}})
        assert no_length.status_code == 422

        no_strokes = client.post(
            "/api/v1/generate-workout",
            json={"distance": 2000, "options": {"strokes": {"freestyle": False}}},
        )
        assert no_strokes.status_code == 422


def test_current_and_recent_workouts(monkeypatch):
    with _build_client(monkeypatch) as client:
        missing = client.get("/api/v1/workouts/current")
        assert missing.status_code == 404
        assert missing.json()["detail"]["code"] == "NOT_FOUND"

        first = client.post("/api/v1/generate-workout", json={"distance": 1500, "seed": 1}).json()
        second = client.post("/api/v1/generate-workout", json={"distance": 2500, "seed": 2}).json()

        current = client.get("/api/v1/workouts/current")
        assert current.status_code == 200
        assert current.json()["fingerprint"] == second["fingerprint"]

        recent = client.get("/api/v1/workouts/recent", params={"limit": 5}).json()
        assert recent["total"] == 2
        assert [w["fingerprint"] for w in recent["items"]] == [second["fingerprint"], first["fingerprint"]]


def test_reroll_set_returns_different_body(monkeypatch):
    with _build_client(monkeypatch) as client:
        resp = client.post(
            "/api/v1/reroll-set",
            json={"label": "Main", "target_distance": 1000, "avoid_text": "10x100 steady", "reroll_count": 2},
        )
        assert resp.status_code == 200, resp.text
        data = resp.json()
        assert data["ok"] is True
        assert data["set_body"] != "10x100 steady"
        assert body_distance(data["set_body"]) == 1000


def test_reroll_set_updates_current_workout(monkeypatch):
    with _build_client(monkeypatch) as client:
        workout = client.post("/api/v1/generate-workout", json={"distance": 2000, "seed": 42}).json()
        index = next(i for i, s in enumerate(workout["sections"]) if s["label"].startswith("Main"))
        section = workout["sections"][index]

        resp = client.post(
            "/api/v1/reroll-set",
            json={
                "label": section["label"],
                "target_distance": section["target_distance"],
                "avoid_text": section["body"],
                "section_index": index,
            },
        )
        assert resp.status_code == 200, resp.text

        current = client.get("/api/v1/workouts/current").json()
        assert current["sections"][index]["body"] == resp.json()["set_body"]
        assert current["sections"][index]["modified"] is True
        assert current["total_distance"] == 2000
        assert resp.json()["set_body"].split("\n")[0] in current["text"]
        assert current["fingerprint"] != workout["fingerprint"]
        assert current["section_meta"][index]["label"] == section["label"]


def test_reroll_set_reports_exhaustion(monkeypatch):
    with _build_client(monkeypatch) as client:
        resp = client.post(
            "/api/v1/reroll-set",
            json={
                "label": "Drill",
                "target_distance": 6000,
                "pool": {"pool": "50m"},
                "avoid_text": "6000 drill easy",
            },
        )
        assert resp.status_code == 422
        assert resp.json()["detail"]["code"] == "REROLL_FAILED"


def test_generate_rate_limit_returns_429_when_enabled(monkeypatch):
    env = {
        "APP_ENV": "dev",
        "RATE_LIMIT_ENABLED": "true",
        "GENERATE_RATE_LIMIT": "2/minute",
    }
    with _build_client(monkeypatch, env_overrides=env) as client:
        for _ in range(2):
            resp = client.post("/api/v1/generate-workout", json={"distance": 100})
            assert resp.status_code == 422
        limited = client.post("/api/v1/generate-workout", json={"distance": 100})
        assert limited.status_code == 429, limited.text
        assert limited.json()["detail"]["code"] == "RATE_LIMITED"


def test_reroll_set_normalizes_label(monkeypatch):
    with _build_client(monkeypatch) as client:
        resp = client.post("/api/v1/reroll-set", json={"label": "warm-up", "target_distance": 400})
        assert resp.status_code == 200, resp.text
        assert resp.json()["label"] == "Warm up"
