"""Tests for models.py - decoding server payloads."""

from __future__ import annotations

import json

import pytest

from lexterm.errors import MalformedResponse
from lexterm.models import (
    AuthResult,
    Dictionary,
    FailedItem,
    FailureStage,
    ImportJob,
    JobStatus,
    LearningStats,
    SubmitResult,
    TodayTasks,
    UserIdentity,
    Word,
)


class TestImportJob:
    """Tests for ImportJob.from_wire."""

    def test_snake_case_payload(self):
        job = ImportJob.from_wire(
            {
                "task_id": "abc",
                "status": "processing",
                "progress": 40,
                "total": 10,
                "processed": 4,
                "failed_words": ["qwzx"],
            }
        )

        assert job.job_id == "abc"
        assert job.status is JobStatus.PROCESSING
        assert job.progress_percent == 40
        assert job.total_items == 10
        assert job.processed_items == 4
        assert job.failed_items == (FailedItem(item="qwzx"),)

    def test_camel_case_payload_with_details(self):
        job = ImportJob.from_wire(
            {
                "taskId": "abc",
                "status": "COMPLETED",
                "progress": 100,
                "failedWords": ["ignored"],
                "failedDetails": [
                    {"word": "qwzx", "stage": "translate", "reason": "no entry"},
                    {"word": "zzz", "stage": "save", "reason": "db"},
                ],
            }
        )

        assert job.status is JobStatus.COMPLETED
        assert [f.item for f in job.failed_items] == ["qwzx", "zzz"]
        assert job.failed_items[0].stage is FailureStage.TRANSLATE
        assert job.failed_items[1].stage is FailureStage.PERSIST

    def test_progress_is_clamped(self):
        assert ImportJob.from_wire({"task_id": "a", "progress": 130}).progress_percent == 100
        assert ImportJob.from_wire({"task_id": "a", "progress": -5}).progress_percent == 0

    def test_job_id_falls_back_to_requested_id(self):
        assert ImportJob.from_wire({"status": "pending"}, job_id="req").job_id == "req"

    def test_unknown_status_is_malformed(self):
        with pytest.raises(MalformedResponse):
            ImportJob.from_wire({"task_id": "a", "status": "exploded"})

    def test_non_numeric_counts_are_malformed(self):
        with pytest.raises(MalformedResponse):
            ImportJob.from_wire({"task_id": "a", "status": "processing", "total": "n/a"})
        with pytest.raises(MalformedResponse):
            ImportJob.from_wire({"task_id": "a", "status": "processing", "processedItems": [1]})

    def test_unknown_stage_maps_to_unknown(self):
        item = FailedItem.from_wire({"item": "x", "stage": "network"})

        assert item.stage is FailureStage.UNKNOWN


class TestWord:
    """Tests for Word.from_wire meaning parsing."""

    def test_json_string_meaning(self):
        meaning = json.dumps({"definitions": [{"pos": "n.", "text": "a fruit"}]})

        word = Word.from_wire({"id": 5, "word": "apple", "meaning": meaning, "phonetic": "/ap/"})

        assert word.text == "apple"
        assert word.phonetic == "/ap/"
        assert word.senses[0].part_of_speech == "n."
        assert word.senses[0].gloss == "a fruit"

    def test_plain_text_meaning(self):
        word = Word.from_wire({"id": 5, "word": "apple", "meaning": "a fruit"})

        assert word.senses[0].gloss == "a fruit"
        assert word.senses[0].part_of_speech == ""

    def test_missing_id_is_malformed(self):
        with pytest.raises(MalformedResponse):
            Word.from_wire({"word": "apple"})


def test_today_tasks_counts():
    tasks = TodayTasks.from_wire(
        {"words": [{"id": 1, "word": "a"}], "reviewCount": 1, "newCount": 0}
    )

    assert len(tasks.words) == 1
    assert tasks.review_count == 1


def test_today_tasks_bad_count_is_malformed():
    with pytest.raises(MalformedResponse):
        TodayTasks.from_wire({"words": [], "reviewCount": "many"})


def test_auth_result_requires_token():
    with pytest.raises(MalformedResponse):
        AuthResult.from_wire({"user": {"id": 1, "username": "ada"}})


def test_auth_result_with_user():
    result = AuthResult.from_wire({"accessToken": "t", "user": {"userId": 1, "username": "ada"}})

    assert result.access_token == "t"
    assert result.user == UserIdentity(id=1, display_name="ada")


def test_dictionary_counts():
    dictionary = Dictionary.from_wire(
        {"id": 2, "name": "Fruit", "totalWords": 10, "learnedWords": 3, "progress": 30}
    )

    assert dictionary.format_counts() == "3/10"


class TestSubmitResult:
    """Tests for SubmitResult.from_wire."""

    def test_reads_scheduling_fields(self):
        result = SubmitResult.from_wire(
            {"wordId": 7, "newStatus": "review", "newInterval": 6, "efFactor": 2.36}
        )

        assert result.word_id == 7
        assert result.new_interval == 6
        assert result.ef_factor == pytest.approx(2.36)

    def test_snake_case_ef_factor(self):
        assert SubmitResult.from_wire({"word_id": 1, "ef_factor": "2.5"}).ef_factor == 2.5

    def test_missing_fields_default_to_none(self):
        result = SubmitResult.from_wire({})

        assert result.ef_factor is None
        assert result.new_interval is None

    def test_non_numeric_interval_is_malformed(self):
        with pytest.raises(MalformedResponse):
            SubmitResult.from_wire({"wordId": 1, "newInterval": "soon"})

    def test_non_numeric_ef_factor_is_malformed(self):
        with pytest.raises(MalformedResponse):
            SubmitResult.from_wire({"wordId": 1, "efFactor": "high"})


def test_learning_stats_bad_value_is_malformed():
    with pytest.raises(MalformedResponse):
        LearningStats.from_wire({"totalLearned": "lots", "streakDays": 2})
