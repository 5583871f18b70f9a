import json

import pytest

from echo_notes.llm import RemoteCallFailure
from echo_notes.models import Lecture
from echo_notes.services.generation import (
    PLACEHOLDER_TRANSCRIPT,
    GenerationInProgress,
    generate_study_materials,
)
from echo_notes.services.notes.prompts import ROLLING_SUMMARY_SYSTEM
from echo_notes.services.study.prompts import FLASHCARDS_SYSTEM, QUIZ_SYSTEM
from echo_notes.storage import LectureNotFound, LectureStore

FLASHCARDS_REPLY = json.dumps([{"term": "Entropy", "definition": "Disorder."}])
QUIZ_REPLY = json.dumps(
    [
        {
            "question": "Entropy measures?",
            "options": ["Disorder", "Mass", "Charge", "Speed"],
            "correctAnswer": 0,
            "explanation": "By definition.",
        }
    ]
)


class RoutingCompletionClient:
    def __init__(
        self,
        *,
        summary: str = "# Thermo notes",
        flashcards: str = FLASHCARDS_REPLY,
        quiz: str = QUIZ_REPLY,
        fail_summary: bool = False,
    ) -> None:
        self._replies = {
            ROLLING_SUMMARY_SYSTEM: summary,
            FLASHCARDS_SYSTEM: flashcards,
            QUIZ_SYSTEM: quiz,
        }
        self._fail_summary = fail_summary
        self.calls: list[tuple[str, str]] = []
        self.during_summary = None

    def complete(self, *, system_prompt: str, user_prompt: str) -> str:
        self.calls.append((system_prompt, user_prompt))
        if system_prompt == ROLLING_SUMMARY_SYSTEM:
            if self._fail_summary:
                raise RemoteCallFailure("LLM API error: 503 Service Unavailable", status_code=503)
            if self.during_summary is not None:
                self.during_summary()
        return self._replies[system_prompt]


def _stored_lecture(store: LectureStore, *, transcript: str | None = "[00:01] entropy is disorder") -> Lecture:
    lecture = store.import_transcript(
        course_name="Physics",
        date="2026-03-02",
        title="Thermo",
        transcript="",
    )
    lecture = lecture.model_copy(update={"transcript": transcript})
    store.save(lecture)
    return lecture


def test_generate_study_materials_persists_all_artifacts(store: LectureStore) -> None:
    lecture = _stored_lecture(store)
    client = RoutingCompletionClient()
    progress: list[tuple[int, int]] = []

    outcome = generate_study_materials(
        lecture,
        client=client,
        store=store,
        chunk_size=1000,
        on_progress=lambda current, total: progress.append((current, total)),
    )

    assert outcome.warnings == []
    assert progress == [(1, 1)]
    assert [system for system, _ in client.calls] == [ROLLING_SUMMARY_SYSTEM, FLASHCARDS_SYSTEM, QUIZ_SYSTEM]
    assert client.calls[1][1] == "# Thermo notes"
    assert client.calls[2][1] == "# Thermo notes"

    stored = store.load(lecture.audio_path, "Physics")
    assert stored == outcome.lecture
    assert stored is not None
    assert stored.ai_notes == "# Thermo notes"
    assert stored.transcript == "[00:01] entropy is disorder"
    assert [card.term for card in stored.flashcards or []] == ["Entropy"]
    assert [question.correct_answer for question in stored.quiz_questions or []] == [0]


def test_generate_study_materials_uses_placeholder_without_transcript(store: LectureStore) -> None:
    lecture = _stored_lecture(store, transcript=None)
    client = RoutingCompletionClient()

    outcome = generate_study_materials(lecture, client=client, store=store, chunk_size=1000)

    assert PLACEHOLDER_TRANSCRIPT in client.calls[0][1]
    assert outcome.lecture.transcript == PLACEHOLDER_TRANSCRIPT


def test_generate_study_materials_surfaces_extraction_warnings(store: LectureStore) -> None:
    lecture = _stored_lecture(store)
    client = RoutingCompletionClient(flashcards="I cannot produce JSON today.")

    outcome = generate_study_materials(lecture, client=client, store=store, chunk_size=1000)

    assert len(outcome.warnings) == 1
    assert outcome.warnings[0].startswith("flashcards unavailable: invalid JSON")
    assert outcome.lecture.flashcards == []
    assert len(outcome.lecture.quiz_questions or []) == 1
    assert outcome.lecture.ai_notes == "# Thermo notes"


def test_generate_study_materials_summary_failure_persists_nothing(store: LectureStore) -> None:
    lecture = _stored_lecture(store)
    client = RoutingCompletionClient(fail_summary=True)

    with pytest.raises(RemoteCallFailure, match="chunk 1/1"):
        generate_study_materials(lecture, client=client, store=store, chunk_size=1000)

    assert len(client.calls) == 1
    assert store.load(lecture.audio_path, "Physics") == lecture


def test_generate_study_materials_is_single_flight_per_lecture(store: LectureStore) -> None:
    lecture = _stored_lecture(store)
    client = RoutingCompletionClient()
    nested_errors: list[Exception] = []

    def start_again() -> None:
        try:
            generate_study_materials(lecture, client=RoutingCompletionClient(), store=store)
        except GenerationInProgress as exc:
            nested_errors.append(exc)

    client.during_summary = start_again

    outcome = generate_study_materials(lecture, client=client, store=store, chunk_size=1000)

    assert len(nested_errors) == 1
    assert outcome.lecture.ai_notes == "# Thermo notes"

    again = generate_study_materials(lecture, client=RoutingCompletionClient(), store=store, chunk_size=1000)
    assert again.lecture.id == lecture.id


def test_generate_study_materials_merges_into_latest_record(store: LectureStore) -> None:
    lecture = _stored_lecture(store)
    client = RoutingCompletionClient()

    def rename_meanwhile() -> None:
        store.update(
            lecture.audio_path,
            "Physics",
            lambda current: current.model_copy(update={"title": "Thermo (edited)"}),
        )

    client.during_summary = rename_meanwhile

    outcome = generate_study_materials(lecture, client=client, store=store, chunk_size=1000)

    assert outcome.lecture.title == "Thermo (edited)"
    assert outcome.lecture.ai_notes == "# Thermo notes"


def test_generate_study_materials_requires_stored_lecture(store: LectureStore) -> None:
    lecture = _stored_lecture(store)
    store.delete(lecture.audio_path, "Physics")
    client = RoutingCompletionClient()

    with pytest.raises(LectureNotFound):
        generate_study_materials(lecture, client=client, store=store, chunk_size=1000)

    assert client.calls == []
