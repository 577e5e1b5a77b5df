"""
Pytest Configuration and Fixtures.

This file configures pytest and provides shared fixtures for all tests.
"""
import io
import json
import sys
from pathlib import Path

import pytest
from rich.console import Console

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from rankdrill.config import Settings, get_settings  # noqa: E402


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "smoke: Smoke tests for CLI commands")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "smoke" in str(item.fspath):
            item.add_marker(pytest.mark.smoke)


class ScriptedInput:
    """
    Stand-in for builtins.input.

    Each call returns the next scripted response (a string, or a callable
    producing one). Once the script runs out, EOFError is raised, which is
    what an aborted prompt looks like.
    """

    def __init__(self, responses=()):
        self.responses = list(responses)
        self.calls = 0

    def __call__(self, *args):
        self.calls += 1
        if not self.responses:
            raise EOFError
        response = self.responses.pop(0)
        return response() if callable(response) else response


@pytest.fixture(autouse=True)
def clear_settings_cache():
    """Settings are cached; start every test from a fresh environment read."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def scripted_input(monkeypatch):
    """Install a ScriptedInput; call it with the responses to script."""

    def install(*responses):
        fake = ScriptedInput(responses)
        monkeypatch.setattr("builtins.input", fake)
        return fake

    return install


@pytest.fixture
def console():
    """A console that writes to memory."""
    return Console(file=io.StringIO(), width=120, force_terminal=False)


@pytest.fixture
def settings(tmp_path):
    """Settings pointing at temporary files, without pacing delay."""
    return Settings(
        sets_dir=tmp_path / "sets",
        progress_file=tmp_path / "user.json",
        feedback_delay=0.0,
        load_workers=2,
    )


@pytest.fixture
def write_set(tmp_path):
    """Write a question-set file under tmp_path/sets and return its path."""

    def write(name: str, entries) -> Path:
        path = tmp_path / "sets" / f"{name}.json"
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(entries), encoding="utf-8")
        return path

    return write


@pytest.fixture
def spanish_set(write_set):
    """A small vocabulary set."""
    return write_set(
        "spanish/basic_words",
        [
            {"id": "hola", "q": "hola", "a": "hello"},
            {"id": "gato", "q": "gato", "a": "cat"},
            {"id": "perro", "q": "perro", "a": "dog"},
        ],
    )
