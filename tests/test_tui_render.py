"""Tests for tui/render.py - Rich renderables for words and jobs."""

from rich.text import Text

from lexterm.errors import ApiError
from lexterm.models import Dictionary, FailedItem, ImportJob, JobStatus, Sense, Word
from lexterm.tui.render import (
    dictionary_label,
    job_renderable,
    upload_error_markup,
    word_back_renderables,
    word_front_text,
)


class TestWordRenderables:
    """Tests for word_front_text and word_back_renderables."""

    def test_front_is_bold_headword(self):
        text = word_front_text(Word(id=1, text="apple", phonetic="ap"))
        assert isinstance(text, Text)
        assert text.plain == "apple  /ap/"

    def test_back_has_example_block(self):
        word = Word(id=1, text="apple", senses=(Sense("n.", "a fruit"),), example="An apple.")
        blocks = word_back_renderables(word)
        assert [b.plain for b in blocks] == ["1. n. a fruit", "", "e.g. An apple."]

    def test_back_placeholder(self):
        blocks = word_back_renderables(Word(id=1, text="x"))
        assert blocks[0].plain == "(no definition)"


class TestJobRenderable:
    """Tests for job_renderable."""

    def test_includes_summary_and_failures(self):
        job = ImportJob(
            job_id="j",
            status=JobStatus.COMPLETED,
            progress_percent=100,
            failed_items=(FailedItem("qwzx"),),
        )
        text = job_renderable(job, summary="Import has 1 failed word(s). e.g. qwzx")
        assert "Import has 1 failed word(s)" in text.plain
        assert "Failed words (1)" in text.plain
        assert "qwzx  [Unknown]" in text.plain

    def test_truncates_long_failure_list(self):
        items = tuple(FailedItem(f"w{i}") for i in range(5))
        job = ImportJob(job_id="j", status=JobStatus.FAILED, progress_percent=100, failed_items=items)
        text = job_renderable(job, max_failed=2)
        assert "... and 3 more" in text.plain
        assert "w3" not in text.plain

    def test_shows_poll_error(self):
        job = ImportJob(job_id="j", status=JobStatus.PROCESSING, progress_percent=10)
        text = job_renderable(job, error="timeout")
        assert "Status check failed: timeout" in text.plain


class TestMarkupLabels:
    """Tests for markup strings built from server or user supplied text."""

    def test_dictionary_label_keeps_brackets_literal(self):
        dictionary = Dictionary(id=1, name="[draft] Fruit", total_words=4, learned_words=1, progress=25)
        text = Text.from_markup(dictionary_label(dictionary))
        assert text.plain == "[draft] Fruit  (1/4 learned, 25%)"

    def test_dictionary_label_with_closing_tag_name(self):
        dictionary = Dictionary(id=1, name="[/bold] oops")
        text = Text.from_markup(dictionary_label(dictionary))
        assert text.plain.startswith("[/bold] oops")

    def test_upload_error_keeps_brackets_literal(self):
        error = ApiError("Bad file [/red] name", code=400)
        text = Text.from_markup(upload_error_markup(error))
        assert text.plain == "Upload failed: Bad file [/red] name"
