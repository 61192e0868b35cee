"""Tests for api.py - endpoint clients over a scripted gateway."""

from __future__ import annotations

import base64

import pytest

from lexterm.api import AuthApi, DictionaryApi, LearningApi
from lexterm.errors import MalformedResponse, TransientError, ValidationError
from lexterm.models import JobStatus, UserIdentity
from lexterm.session_store import SessionStore


class FakeGateway:
    """Gateway double returning scripted data per call."""

    def __init__(self, *results):
        self.results = list(results)
        self.requests = []
        self.store = SessionStore()
        self.cleared = 0

    def call(self, request):
        self.requests.append(request)
        result = self.results.pop(0)
        if isinstance(result, Exception):
            raise result
        return result

    def clear_session(self):
        self.cleared += 1
        self.store.clear()


class TestAuthApi:
    """Tests for AuthApi."""

    def test_login_starts_session(self):
        gateway = FakeGateway({"access_token": "tok", "user": {"id": 4, "username": "ada"}})

        user = AuthApi(gateway).login(" ada ", "secret")

        assert user == UserIdentity(id=4, display_name="ada")
        assert gateway.store.access_token == "tok"
        request = gateway.requests[0]
        assert request.path == "/auth/login"
        assert request.authenticated is False
        assert request.json == {"username": "ada", "password": "secret"}

    def test_register_uses_register_endpoint(self):
        gateway = FakeGateway({"access_token": "tok"})

        user = AuthApi(gateway).register("bob", "pw")

        assert gateway.requests[0].path == "/auth/register"
        assert user.display_name == "bob"

    def test_empty_credentials_are_rejected_locally(self):
        gateway = FakeGateway()

        with pytest.raises(ValidationError):
            AuthApi(gateway).login("", "pw")

        assert gateway.requests == []

    def test_logout_clears_even_when_server_fails(self):
        gateway = FakeGateway(TransientError("offline"))
        gateway.store.start("tok", None)

        AuthApi(gateway).logout()

        assert gateway.cleared == 1
        assert not gateway.store.is_authenticated

    def test_me_unwraps_nested_user(self):
        gateway = FakeGateway({"user": {"id": 4, "username": "ada"}})

        assert AuthApi(gateway).me() == UserIdentity(id=4, display_name="ada")


class TestDictionaryApi:
    """Tests for DictionaryApi."""

    def test_list_reads_items(self):
        gateway = FakeGateway({"items": [{"id": 1, "name": "Fruit"}], "total": 1})

        dictionaries = DictionaryApi(gateway).list_dictionaries()

        assert [d.name for d in dictionaries] == ["Fruit"]

    def test_list_accepts_bare_list(self):
        gateway = FakeGateway([{"id": 1, "name": "Fruit"}])

        assert len(DictionaryApi(gateway).list_dictionaries()) == 1

    def test_upload_sends_base64_content(self):
        gateway = FakeGateway({"task_id": "job-9"})

        job_id = DictionaryApi(gateway).upload("Fruit", b"apple\nbanana\n")

        assert job_id == "job-9"
        body = gateway.requests[0].json
        assert base64.b64decode(body["fileContent"]) == b"apple\nbanana\n"
        assert body["name"] == "Fruit"

    def test_upload_without_job_id_is_malformed(self):
        gateway = FakeGateway({"status": "pending"})

        with pytest.raises(MalformedResponse):
            DictionaryApi(gateway).upload("Fruit", b"apple\n")

    def test_upload_status_path(self):
        gateway = FakeGateway({"status": "processing", "progress": 10})

        job = DictionaryApi(gateway).upload_status("job-9")

        assert gateway.requests[0].path == "/dictionaries/upload/status/job-9"
        assert job.job_id == "job-9"
        assert job.status is JobStatus.PROCESSING


class TestLearningApi:
    """Tests for LearningApi."""

    def test_today_tasks_params(self):
        gateway = FakeGateway({"words": [], "review_count": 0, "new_count": 0})

        LearningApi(gateway).today_tasks(3, limit=15)

        assert gateway.requests[0].params == {"dict_id": 3, "limit": 15}

    def test_submit_payload(self):
        gateway = FakeGateway({"word_id": 8, "new_status": "review"})

        result = LearningApi(gateway).submit(8, 4, dictionary_id=3, time_spent=6)

        assert gateway.requests[0].json == {
            "word_id": 8,
            "quality": 4,
            "dictionary_id": 3,
            "time_spent": 6,
        }
        assert result.new_status == "review"

    def test_stats(self):
        gateway = FakeGateway({"total_learned": 12, "streak_days": 3})

        stats = LearningApi(gateway).stats()

        assert stats.total_learned == 12
        assert stats.streak_days == 3
