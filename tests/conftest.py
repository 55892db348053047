"""Pytest configuration and fixtures."""

import os
import threading
from typing import Callable, Dict, List, Optional, Union

import pytest

from appforge.agents.app_builder import ApplicationModelBuilder
from appforge.agents.orchestrator import Orchestrator
from appforge.agents.templates import TemplateLibrary
from appforge.agents.web_generator import WebPipeline
from appforge.clients.base import BackendAdapter, BackendTransportError, Completion, Usage
from appforge.clients.registry import AdapterRegistry
from appforge.core.config import Settings


# ============================================================================
# Pytest Hooks
# ============================================================================

def pytest_configure(config):
    """Configure pytest with environment variables."""
    os.environ["APPFORGE_LOG_LEVEL"] = "DEBUG"
    os.environ["APPFORGE_BACKEND"] = "scripted"
    os.environ["APPFORGE_ANTHROPIC_API_KEY"] = ""
    os.environ["APPFORGE_OPENAI_API_KEY"] = ""
    os.environ["APPFORGE_GEMINI_API_KEY"] = ""
    os.environ["APPFORGE_MINIMAX_API_KEY"] = ""
    os.environ["APPFORGE_ZHIPU_API_KEY"] = ""


# ============================================================================
# Scripted Backend
# ============================================================================

Reply = Union[str, Completion, Exception, Callable[[str, Optional[str]], str]]

MINIMAL_APP_JSON = """{
  "name": "Todo Master",
  "description": "Keep track of everything you need to do",
  "screens": [{"id": "home", "name": "Home", "components": []}],
  "navigation": {"type": "tab", "structure": [{"id": "home-tab", "name": "Home", "screenId": "home"}]},
  "features": [{"id": "reminders", "name": "Reminders", "enabled": true}]
}"""

WEB_SPEC_JSON = """{
  "name": "Todo Web",
  "description": "Todo list in the browser",
  "stack": "vue",
  "pages": ["Home", "Tasks"],
  "components": ["TaskList", "TaskItem", "Header", "Footer"],
  "apiEndpoints": ["/api/tasks"],
  "database": {"tables": [{"name": "tasks", "fields": [{"name": "id"}, {"name": "title"}]}]},
  "features": ["crud"]
}"""


class ScriptedAdapter(BackendAdapter):
    """
    In-memory backend. Replies are chosen by the first rule whose key appears in
    the system prompt; anything unmatched gets ``default``.
    """

    def __init__(
        self,
        rules: Optional[Dict[str, Reply]] = None,
        default: Reply = "generated source",
        backend_id: str = "scripted",
        model: str = "scripted-1",
    ) -> None:
        self.rules = dict(rules or {})
        self.default = default
        self.backend_id = backend_id
        self._model = model
        self.calls: List[dict] = []
        self.closed = False
        self._lock = threading.Lock()

    @property
    def model(self) -> str:
        return self._model

    def complete(self, prompt, system=None, model=None, max_tokens=None):
        with self._lock:
            self.calls.append({"prompt": prompt, "system": system, "model": model})

        reply = self.default
        for key, rule in self.rules.items():
            if system and key in system:
                reply = rule
                break

        if isinstance(reply, Exception):
            raise reply
        if isinstance(reply, Completion):
            return reply
        if callable(reply):
            reply = reply(prompt, system)
        return Completion(text=reply, usage=None, model_used=model or self._model)

    def close(self):
        self.closed = True


# System prompt fragments that identify each call
APP_MODEL_CALL = "mobile app architect"
IOS_CALL = "expert iOS developer"
ANDROID_CALL = "expert Android developer"
REACT_NATIVE_CALL = "expert React Native developer"
WEB_SPEC_CALL = "full-stack web developer"


def transport_timeout() -> BackendTransportError:
    return BackendTransportError("Backend 'scripted' unreachable: timed out", "scripted")


def completion(text: str, prompt_tokens: int, completion_tokens: int) -> Completion:
    return Completion(
        text=text,
        usage=Usage(
            prompt_tokens=prompt_tokens,
            completion_tokens=completion_tokens,
            total_tokens=prompt_tokens + completion_tokens,
        ),
        model_used="scripted-1",
    )


# ============================================================================
# Core Fixtures
# ============================================================================

@pytest.fixture
def settings():
    """Test settings, independent of the process environment cache."""
    return Settings(backend="scripted", default_stack="nextjs", max_parallel_targets=4)


@pytest.fixture
def scripted_adapter():
    """Backend answering the app model call with valid JSON and everything else with text."""
    return ScriptedAdapter({APP_MODEL_CALL: MINIMAL_APP_JSON})


@pytest.fixture
def registry(scripted_adapter):
    registry = AdapterRegistry()
    registry.register("scripted", scripted_adapter)
    return registry


@pytest.fixture
def templates():
    return TemplateLibrary()


@pytest.fixture
def builder(templates):
    return ApplicationModelBuilder(templates)


@pytest.fixture
def web_pipeline():
    return WebPipeline(default_stack="nextjs")


@pytest.fixture
def orchestrator(registry, builder, web_pipeline):
    """Orchestrator wired to the scripted backend."""
    return Orchestrator(
        registry=registry,
        builder=builder,
        web_pipeline=web_pipeline,
        default_backend="scripted",
        max_parallel_targets=4,
    )


# ============================================================================
# Data Fixtures
# ============================================================================

@pytest.fixture
def sample_app_dict():
    """Valid Application Model payload in wire (camelCase) form."""
    return {
        "name": "Fitness Buddy",
        "description": "Track workouts",
        "platforms": ["ios", "android"],
        "screens": [
            {
                "id": "home",
                "name": "Home",
                "components": [
                    {
                        "id": "title",
                        "type": "text",
                        "props": {"content": "Today"},
                        "bindings": {"value": {"type": "state", "source": "workouts"}},
                    }
                ],
            },
            {"id": "history", "name": "History"},
        ],
        "navigation": {
            "type": "tab",
            "structure": [
                {"id": "home-tab", "name": "Home", "screenId": "home"},
                {"id": "history-tab", "name": "History", "screenId": "history"},
            ],
            "initialRoute": "home",
        },
        "theme": {"colors": {"primary": "#FF0000", "highlight": "#00FF00"}, "darkMode": True},
        "dataModels": [
            {
                "id": "workout",
                "name": "Workout",
                "fields": [{"name": "title", "type": "string", "required": True}],
            }
        ],
        "globalState": [{"id": "workouts", "name": "workouts", "type": "array"}],
        "features": ["auth", {"id": "charts", "name": "Charts", "enabled": False}],
        "permissions": [{"id": "health", "name": "Health", "description": "Read steps"}],
    }
