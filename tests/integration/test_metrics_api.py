import json

from fastapi.testclient import TestClient

from smart_pantry.main import create_app


def test_ui_latency_sample_is_logged(data_env):
    client = TestClient(create_app())
    resp = client.post(
        "/api/v1/metrics/ui",
        json={"name": "suggest_e2e", "duration_ms": 812.5, "recipe_count": 5},
        headers={"X-Correlation-Id": "abc"},
    )
    assert resp.json() == {"ok": True}

    line = json.loads((data_env / "latency_log.jsonl").read_text().splitlines()[-1])
    assert line["name"] == "suggest_e2e"
    assert line["origin"] == "frontend"
    assert line["corr"] == "abc"
    assert line["extra"] == {"recipe_count": 5}


def test_unknown_ui_metric_is_rejected(data_env):
    client = TestClient(create_app())
    resp = client.post("/api/v1/metrics/ui", json={"name": "whatever", "duration_ms": 1})
    assert resp.status_code == 422
    assert not (data_env / "latency_log.jsonl").exists()
