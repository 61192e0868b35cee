"""Tests for review/session.py - the reveal-then-score review flow."""

from __future__ import annotations

import pytest

from lexterm.errors import ApiError, MalformedResponse, TransientError, ValidationError
from lexterm.models import SubmitResult, TodayTasks, Word
from lexterm.review import Quality, ReviewSession, ReviewStateError, SessionState


def make_words(*texts):
    return tuple(Word(id=i + 1, text=text) for i, text in enumerate(texts))


class FakeLearningApi:
    """Learning endpoints backed by scripted data."""

    def __init__(self, words=(), review_count=0, new_count=0):
        self.tasks = TodayTasks(words=tuple(words), review_count=review_count, new_count=new_count)
        self.task_requests = []
        self.submitted = []
        self.fail_next_submit = None
        self.fail_load = None

    def today_tasks(self, dictionary_id, limit=20):
        self.task_requests.append((dictionary_id, limit))
        if self.fail_load is not None:
            raise self.fail_load
        return self.tasks

    def submit(self, word_id, quality, dictionary_id=None, time_spent=None):
        if self.fail_next_submit is not None:
            error, self.fail_next_submit = self.fail_next_submit, None
            raise error
        self.submitted.append(
            {
                "word_id": word_id,
                "quality": quality,
                "dictionary_id": dictionary_id,
                "time_spent": time_spent,
            }
        )
        return SubmitResult(word_id=word_id, new_status="learning")


class FakeClock:
    def __init__(self):
        self.now = 100.0

    def __call__(self):
        return self.now


class TestLoad:
    """Tests for ReviewSession.load."""

    def test_load_activates_queue(self):
        api = FakeLearningApi(make_words("apple", "banana"), review_count=1, new_count=1)
        session = ReviewSession(api, dictionary_id=3, limit=10)

        state = session.load()

        assert state is SessionState.ACTIVE
        assert session.current_word().text == "apple"
        assert session.total == 2
        assert session.remaining == 2
        assert session.review_count == 1
        assert session.new_count == 1
        assert api.task_requests == [(3, 10)]

    def test_empty_queue_finishes_immediately(self):
        api = FakeLearningApi()
        session = ReviewSession(api, dictionary_id=3)

        assert session.load() is SessionState.FINISHED
        assert session.is_finished
        assert session.current_word() is None

    def test_load_caps_at_limit(self):
        api = FakeLearningApi(make_words("a", "b", "c", "d"))
        session = ReviewSession(api, dictionary_id=3, limit=2)

        session.load()

        assert session.total == 2

    def test_failed_load_returns_to_idle(self):
        api = FakeLearningApi(make_words("a"))
        api.fail_load = TransientError("offline")
        session = ReviewSession(api, dictionary_id=3)

        with pytest.raises(TransientError):
            session.load()

        assert session.state is SessionState.IDLE
        assert isinstance(session.error, TransientError)

    def test_restart_fetches_fresh_queue(self):
        api = FakeLearningApi(make_words("a"))
        session = ReviewSession(api, dictionary_id=3)
        session.load()
        session.reveal()
        session.submit(4)

        api.tasks = TodayTasks(words=make_words("b", "c"))
        session.restart()

        assert session.state is SessionState.ACTIVE
        assert session.completed_count == 0
        assert session.current_word().text == "b"
        assert not session.revealed


class TestSubmit:
    """Tests for scoring words."""

    def test_full_session(self):
        """Three words scored 5, 3, 0 finish the session."""
        api = FakeLearningApi(make_words("apple", "banana", "cherry"))
        session = ReviewSession(api, dictionary_id=3)
        session.load()

        for quality in (5, 3, 0):
            session.reveal()
            session.submit(quality)

        assert session.is_finished
        assert session.completed_count == 3
        assert session.current_word() is None
        assert [s["quality"] for s in api.submitted] == [5, 3, 0]
        assert [s["word_id"] for s in api.submitted] == [1, 2, 3]
        assert session.outcomes == {0: 1, 1: 0, 2: 0, 3: 1, 4: 0, 5: 1}

    def test_submit_before_reveal_is_refused(self):
        api = FakeLearningApi(make_words("apple"))
        session = ReviewSession(api, dictionary_id=3)
        session.load()

        with pytest.raises(ReviewStateError):
            session.submit(4)

        assert api.submitted == []
        assert session.cursor == 0

    @pytest.mark.parametrize("quality", [-1, 6, 2.5, "3", True])
    def test_invalid_quality_is_refused(self, quality):
        api = FakeLearningApi(make_words("apple"))
        session = ReviewSession(api, dictionary_id=3)
        session.load()
        session.reveal()

        with pytest.raises(ValidationError):
            session.submit(quality)

        assert api.submitted == []
        assert session.revealed

    def test_quality_enum_is_accepted(self):
        api = FakeLearningApi(make_words("apple"))
        session = ReviewSession(api, dictionary_id=3)
        session.load()
        session.reveal()

        session.submit(Quality.EASY)

        assert api.submitted[0]["quality"] == 4
        assert type(api.submitted[0]["quality"]) is int

    def test_failed_submit_keeps_word_revealed(self):
        """A failed outcome leaves the cursor in place for a retry."""
        api = FakeLearningApi(make_words("apple", "banana"))
        api.fail_next_submit = ApiError("server busy", status_code=503)
        session = ReviewSession(api, dictionary_id=3)
        session.load()
        session.reveal()

        with pytest.raises(ApiError):
            session.submit(2)

        assert session.cursor == 0
        assert session.revealed
        assert session.completed_count == 0
        assert not session.is_submitting
        assert isinstance(session.error, ApiError)

        session.submit(2)

        assert session.cursor == 1
        assert session.error is None
        assert not session.revealed

    def test_undecodable_acknowledgement_releases_submit(self, monkeypatch):
        """A garbled reply still clears the in-flight flag so the word can be retried."""
        api = FakeLearningApi(make_words("apple", "banana"))
        session = ReviewSession(api, dictionary_id=3)
        session.load()
        session.reveal()
        original_submit = api.submit

        def garbled_submit(word_id, quality, **kwargs):
            return SubmitResult.from_wire({"wordId": word_id, "newInterval": "soon"})

        monkeypatch.setattr(api, "submit", garbled_submit)

        with pytest.raises(MalformedResponse):
            session.submit(3)

        assert not session.is_submitting
        assert isinstance(session.error, MalformedResponse)
        assert session.cursor == 0
        assert session.revealed

        monkeypatch.setattr(api, "submit", original_submit)
        session.submit(3)

        assert session.cursor == 1
        assert session.error is None

    def test_unexpected_error_releases_submit(self, monkeypatch):
        api = FakeLearningApi(make_words("apple"))
        session = ReviewSession(api, dictionary_id=3)
        session.load()
        session.reveal()

        def broken_submit(word_id, quality, **kwargs):
            raise RuntimeError("boom")

        monkeypatch.setattr(api, "submit", broken_submit)

        with pytest.raises(RuntimeError):
            session.submit(3)

        assert not session.is_submitting
        assert session.cursor == 0

    def test_submit_when_finished_is_refused(self):
        api = FakeLearningApi()
        session = ReviewSession(api, dictionary_id=3)
        session.load()

        with pytest.raises(ReviewStateError):
            session.submit(3)

    def test_reveal_is_idempotent(self):
        api = FakeLearningApi(make_words("apple"))
        session = ReviewSession(api, dictionary_id=3)
        session.load()

        session.reveal()
        session.reveal()

        assert session.revealed

    def test_time_spent_is_measured_per_word(self):
        clock = FakeClock()
        api = FakeLearningApi(make_words("apple", "banana"))
        session = ReviewSession(api, dictionary_id=3, clock=clock)
        session.load()

        clock.now += 7.4
        session.reveal()
        session.submit(4)
        clock.now += 3
        session.reveal()
        session.submit(4)

        assert [s["time_spent"] for s in api.submitted] == [7, 3]
        assert all(s["dictionary_id"] == 3 for s in api.submitted)


class TestQuality:
    def test_labels_cover_scale(self):
        assert [q.value for q in Quality] == [0, 1, 2, 3, 4, 5]
        assert all(q.label for q in Quality)
