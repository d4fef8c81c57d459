import json
from types import SimpleNamespace

import pytest

from smart_pantry.config import Settings


class FakeCompletions:
    """Stands in for `OpenAI().chat.completions`; records every call."""

    def __init__(self, reply=None, error=None):
        self.reply = reply
        self.error = error
        self.calls = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        message = SimpleNamespace(content=self.reply)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


class FakeOpenAI:
    def __init__(self, reply=None, error=None):
        self.completions = FakeCompletions(reply, error)
        self.chat = SimpleNamespace(completions=self.completions)


def recipe_reply(n, fenced=False):
    rows = [
        {"name": f"Recipe {i}", "ingredients": [f"{i} eggs"], "instructions": ["mix", "cook"]}
        for i in range(1, n + 1)
    ]
    text = json.dumps(rows)
    return f"```json\n{text}\n```" if fenced else text


@pytest.fixture
def fake_openai():
    return FakeOpenAI


@pytest.fixture
def make_reply():
    return recipe_reply


@pytest.fixture
def data_env(tmp_path, monkeypatch):
    # isolate data dir for this test run
    d = tmp_path / "data"
    d.mkdir()
    monkeypatch.setenv("DATA_DIR", str(d))
    monkeypatch.setenv("PANTRY_FILE", str(d / "pantry.json"))
    monkeypatch.setenv("FAVORITES_FILE", str(d / "favoriteRecipes.json"))
    monkeypatch.setenv("EVENTS_FILE", str(d / "activity_log.jsonl"))
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    monkeypatch.delenv("RICH_RECIPES", raising=False)
    monkeypatch.delenv("RECIPE_COUNT", raising=False)
    return d


@pytest.fixture
def settings(data_env):
    return Settings(openai_api_key="test")
