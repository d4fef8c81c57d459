import json

from fastapi.testclient import TestClient

from smart_pantry.api.v1.recipes import get_gate, get_generator
from smart_pantry.config import Settings
from smart_pantry.main import create_app
from smart_pantry.services.llm import GenerationGate, OpenAIRecipeGenerator


def _app_with(client_stub, **overrides):
    app = create_app()
    settings = Settings(openai_api_key="test", **overrides)
    app.dependency_overrides[get_generator] = lambda: OpenAIRecipeGenerator(settings, client=client_stub)
    return app


def _stock(client, *names):
    for n in names:
        client.put(f"/api/pantry/{n}", json={"quantity": 1})


def test_suggest_uses_pantry_names(data_env, fake_openai, make_reply):
    stub = fake_openai(reply=make_reply(5, fenced=True))
    client = TestClient(_app_with(stub))
    _stock(client, "eggs", "flour", "milk")

    resp = client.post("/api/recipes/suggest")
    assert resp.status_code == 200
    body = resp.json()
    assert body["malformed"] is False
    assert len(body["recipes"]) == 5
    assert body["recipes"][0] == {"name": "Recipe 1", "ingredients": ["1 eggs"], "instructions": ["mix", "cook"]}
    assert "eggs, flour, milk" in stub.completions.calls[0]["messages"][-1]["content"]


def test_suggest_logs_latency_and_activity(data_env, fake_openai, make_reply):
    client = TestClient(_app_with(fake_openai(reply=make_reply(5))))
    _stock(client, "eggs")
    client.post("/api/recipes/suggest", headers={"X-Correlation-Id": "abc"})

    latency = [json.loads(l) for l in (data_env / "latency_log.jsonl").read_text().splitlines()]
    assert latency[-1]["name"] == "suggest_generate"
    assert latency[-1]["corr"] == "abc"
    events = [json.loads(l) for l in (data_env / "activity_log.jsonl").read_text().splitlines()]
    assert events[-1]["type"] == "suggest"
    assert events[-1]["payload"]["recipe_count"] == 5


def test_rich_variant_serializes_camel_case(data_env, fake_openai):
    reply = json.dumps([{"name": "Omelette", "ingredients": ["2 eggs"], "instructions": ["whisk"]}])
    client = TestClient(_app_with(fake_openai(reply=reply), rich_recipes=True, recipe_count=1))
    _stock(client, "Eggs")

    recipe = client.post("/api/recipes/suggest").json()["recipes"][0]
    assert recipe["canBeMade"] is True
    assert recipe["imageUrl"].startswith("https://placehold.co/")


def test_empty_pantry_is_400_and_no_call(data_env, fake_openai):
    stub = fake_openai(reply="[]")
    client = TestClient(_app_with(stub))
    resp = client.post("/api/recipes/suggest")
    assert resp.status_code == 400
    assert resp.json()["detail"] == "No ingredients in pantry"
    assert stub.completions.calls == []


def test_malformed_reply_is_200_with_raw_text(data_env, fake_openai):
    client = TestClient(_app_with(fake_openai(reply="Sorry, I can't help with that.")))
    _stock(client, "eggs")
    body = client.post("/api/recipes/suggest").json()
    assert body["malformed"] is True
    assert body["recipes"] == [
        {"name": "Parsing Error", "ingredients": ["Sorry, I can't help with that."], "instructions": []}
    ]


def test_service_failure_is_502(data_env, fake_openai):
    client = TestClient(_app_with(fake_openai(error=ConnectionError("connection reset"))))
    _stock(client, "eggs")
    resp = client.post("/api/recipes/suggest")
    assert resp.status_code == 502
    assert "connection reset" in resp.json()["detail"]


def test_missing_key_is_503(data_env):
    client = TestClient(create_app())  # OPENAI_API_KEY unset by data_env
    _stock(client, "eggs")
    resp = client.post("/api/recipes/suggest")
    assert resp.status_code == 503
    assert "OPENAI_API_KEY" in resp.json()["detail"]


def test_second_generation_in_flight_is_409(data_env, fake_openai, make_reply):
    stub = fake_openai(reply=make_reply(5))
    app = _app_with(stub)
    gate = GenerationGate()
    app.dependency_overrides[get_gate] = lambda: gate
    client = TestClient(app)
    _stock(client, "eggs")

    with gate.hold():
        resp = client.post("/api/recipes/suggest")
    assert resp.status_code == 409
    assert stub.completions.calls == []
    assert client.post("/api/recipes/suggest").status_code == 200
