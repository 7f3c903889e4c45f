"""Tests for the web job API."""

from __future__ import annotations

import time
from typing import Any, Callable, Optional

import pytest
from flask import Flask
from flask.testing import FlaskClient

from localeweave.ai.factory import ProviderFactory
from localeweave.exceptions import TranslationError
from localeweave.translation.manager import TranslationOutcome
from localeweave.translation.progress import TranslationProgress
from localeweave.web import create_app
from localeweave.web import tasks
from tests.fakes import FakeProvider

CONFIG = {
    "provider": "chatgpt",
    "openai_key": "test-key",
    "source_language": "en",
    "target_languages": [{"code": "it", "name": "Italian"}],
    "input_file": "en.json",
}


@pytest.fixture
def app() -> Flask:
    """Application under test."""
    app = create_app()
    app.config["TESTING"] = True
    return app


@pytest.fixture
def client(app: Flask) -> FlaskClient:
    """Test client."""
    return app.test_client()


class FakeManager:
    """Stands in for TranslationManager inside background jobs."""

    behaviour: Callable[["FakeManager"], TranslationOutcome] = staticmethod(
        lambda manager: TranslationOutcome(success_count=1, outputs={"it": {"it": {}}})
    )

    def __init__(
        self,
        config,
        progress_callback: Optional[Callable[[TranslationProgress], None]] = None,
        cancel_check: Optional[Callable[[], bool]] = None,
    ) -> None:
        self.config = config
        self.progress_callback = progress_callback
        self.cancel_check = cancel_check

    def translate_all(self) -> TranslationOutcome:
        return type(self).behaviour(self)

    def close(self) -> None:
        pass


@pytest.fixture
def fake_manager(monkeypatch: pytest.MonkeyPatch) -> type[FakeManager]:
    """Replace the job's TranslationManager."""

    class Manager(FakeManager):
        pass

    monkeypatch.setattr(tasks, "TranslationManager", Manager)
    return Manager


def wait_for_state(client: FlaskClient, job_id: str, states: tuple[str, ...], timeout: float = 5.0) -> dict[str, Any]:
    deadline = time.monotonic() + timeout
    while True:
        data = client.get(f"/api/translations/{job_id}").get_json()
        if data["state"] in states or time.monotonic() > deadline:
            return data
        time.sleep(0.01)


def test_health(client: FlaskClient) -> None:
    """Health check answers ok."""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.get_json()["status"] == "ok"


def test_start_job_requires_config(client: FlaskClient) -> None:
    """A body without config is rejected."""
    response = client.post("/api/translations", json={})
    assert response.status_code == 400
    assert response.get_json()["code"] == "config_missing"


def test_start_job_invalid_config(client: FlaskClient) -> None:
    """Configuration errors come back with their code."""
    response = client.post("/api/translations", json={"config": {**CONFIG, "openai_key": ""}})
    assert response.status_code == 400
    assert response.get_json()["code"] == "api_key_missing"


@pytest.mark.parametrize(
    ("field", "value", "code"),
    [
        ("max_retries", "3", "invalid_max_retries"),
        ("max_concurrent_requests", None, "invalid_concurrency"),
        ("request_timeout", "30", "invalid_timeout"),
    ],
)
def test_start_job_rejects_mistyped_numbers(client: FlaskClient, field: str, value: Any, code: str) -> None:
    """Wrongly typed numeric settings are a 400, not a server error."""
    response = client.post("/api/translations", json={"config": {**CONFIG, field: value}})
    assert response.status_code == 400
    assert response.get_json()["code"] == code


def test_job_runs_to_completion(client: FlaskClient, fake_manager: type[FakeManager]) -> None:
    """A started job reports progress and its result."""

    def behaviour(manager: FakeManager) -> TranslationOutcome:
        manager.progress_callback(TranslationProgress(language="Italian", current_key="greeting", progress=100.0))
        return TranslationOutcome(success_count=1)

    fake_manager.behaviour = staticmethod(behaviour)

    response = client.post("/api/translations", json={"config": CONFIG})
    assert response.status_code == 202
    job_id = response.get_json()["job_id"]

    data = wait_for_state(client, job_id, ("completed", "failed"))

    assert data["state"] == "completed"
    assert data["languages"] == ["it"]
    assert data["result"]["success_count"] == 1
    assert data["progress"]["current_key"] == "greeting"
    assert len(data["progress_history"]) == 1


def test_job_with_failed_language(client: FlaskClient, fake_manager: type[FakeManager]) -> None:
    """A run with failures ends in the failed state."""
    fake_manager.behaviour = staticmethod(lambda manager: TranslationOutcome(success_count=0, failure_count=1))

    job_id = client.post("/api/translations", json={"config": CONFIG}).get_json()["job_id"]

    assert wait_for_state(client, job_id, ("completed", "failed"))["state"] == "failed"


def test_job_crash_is_reported(client: FlaskClient, fake_manager: type[FakeManager]) -> None:
    """An exception in the run marks the job failed with the error."""

    def behaviour(manager: FakeManager) -> TranslationOutcome:
        raise RuntimeError("disk full")

    fake_manager.behaviour = staticmethod(behaviour)

    job_id = client.post("/api/translations", json={"config": CONFIG}).get_json()["job_id"]
    data = wait_for_state(client, job_id, ("failed",))

    assert data["state"] == "failed"
    assert data["error"] == "RuntimeError: disk full"


def test_cancel_job(client: FlaskClient, fake_manager: type[FakeManager]) -> None:
    """Cancellation reaches the run through its cancel check."""

    def behaviour(manager: FakeManager) -> TranslationOutcome:
        deadline = time.monotonic() + 5
        while not manager.cancel_check() and time.monotonic() < deadline:
            time.sleep(0.01)
        return TranslationOutcome(failure_count=1, cancelled=True)

    fake_manager.behaviour = staticmethod(behaviour)

    job_id = client.post("/api/translations", json={"config": CONFIG}).get_json()["job_id"]
    response = client.post(f"/api/translations/{job_id}/cancel")
    assert response.status_code == 200
    assert response.get_json()["status"] == "cancellation_requested"

    data = wait_for_state(client, job_id, ("cancelled", "completed", "failed"))
    assert data["state"] == "cancelled"
    assert data["result"]["cancelled"] is True

    assert client.post(f"/api/translations/{job_id}/cancel").status_code == 400


def test_unknown_job(client: FlaskClient) -> None:
    """Unknown job ids are 404."""
    assert client.get("/api/translations/nope").status_code == 404
    assert client.post("/api/translations/nope/cancel").status_code == 404


def test_expired_job_removed(monkeypatch: pytest.MonkeyPatch) -> None:
    """Finished jobs disappear after the retention period."""
    job = tasks.JobState(job_id="old", config=None, state="completed", finished_at=time.time() - 601)  # type: ignore[arg-type]
    monkeypatch.setitem(tasks._jobs, "old", job)

    assert tasks.get_job("old") is None


class TestDirectTranslate:
    """Tests for the synchronous translate endpoint."""

    @pytest.fixture
    def provider(self, monkeypatch: pytest.MonkeyPatch) -> FakeProvider:
        fake = FakeProvider(lambda text, code: {"Hello": "Ciao", "Bye": "Ciao ciao"}[text])
        monkeypatch.setattr(ProviderFactory, "create", lambda name, config: fake)
        return fake

    def test_single_text(self, client: FlaskClient, provider: FakeProvider) -> None:
        """A single text is translated; the language name defaults from the code."""
        response = client.post("/api/translate", json={"config": CONFIG, "text": "Hello", "to": "it"})

        assert response.status_code == 200
        assert response.get_json() == {"translation": "Ciao", "to": "it"}
        assert provider.text_calls == [("Hello", "it", "Italian")]
        assert provider.closed

    def test_several_texts(self, client: FlaskClient, provider: FakeProvider) -> None:
        """A list of texts returns a list of translations."""
        response = client.post("/api/translate", json={"config": CONFIG, "texts": ["Hello", "Bye"], "to": "it"})
        assert response.get_json()["translations"] == ["Ciao", "Ciao ciao"]

    def test_missing_target(self, client: FlaskClient, provider: FakeProvider) -> None:
        """The target language is required."""
        response = client.post("/api/translate", json={"config": CONFIG, "text": "Hello"})
        assert response.status_code == 400
        assert response.get_json()["code"] == "target_missing"

    def test_invalid_language(self, client: FlaskClient, provider: FakeProvider) -> None:
        """A malformed code is a validation error."""
        response = client.post("/api/translate", json={"config": CONFIG, "text": "Hello", "to": "ita"})
        assert response.status_code == 400
        assert response.get_json()["code"] == "invalid_language_code"

    def test_translation_failure(self, client: FlaskClient, monkeypatch: pytest.MonkeyPatch) -> None:
        """Provider failures map to 502."""

        def fail(text: str, code: str) -> str:
            raise TranslationError("Server error: 503", code="server_error")

        monkeypatch.setattr(ProviderFactory, "create", lambda name, config: FakeProvider(fail))

        response = client.post("/api/translate", json={"config": CONFIG, "text": "Hello", "to": "it"})

        assert response.status_code == 502
        assert response.get_json()["code"] == "server_error"
