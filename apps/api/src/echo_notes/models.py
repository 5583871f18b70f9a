from __future__ import annotations

from datetime import datetime, timezone
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


def new_id() -> str:
    return str(uuid4())


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class SidecarModel(BaseModel):
    """Base for records persisted as camelCase JSON next to the audio file."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, indent=2)


class Flashcard(SidecarModel):
    id: str = Field(default_factory=new_id)
    term: str
    definition: str
    known: bool = False


class QuizQuestion(SidecarModel):
    id: str = Field(default_factory=new_id)
    question: str
    options: list[str] = Field(min_length=4, max_length=4)
    correct_answer: int = Field(ge=0, le=3)
    explanation: str


class Lecture(SidecarModel):
    id: str = Field(default_factory=new_id)
    course_id: str
    course_name: str
    date: str
    title: str
    audio_path: str
    duration: int = 0
    transcript: str | None = None
    ai_notes: str | None = None
    flashcards: list[Flashcard] | None = None
    quiz_questions: list[QuizQuestion] | None = None
    created_at: str = Field(default_factory=utc_now_iso)


class LectureInfo(BaseModel):
    filename: str
    date: str
    title: str
    path: str
