from datetime import date as Date
from functools import lru_cache
import logging
from pathlib import Path
from typing import Annotated, Any

from fastapi import Depends, FastAPI, HTTPException, Query, Request, Response
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from echo_notes.config import configure_logging, get_settings
from echo_notes.controller import StudyHubController
from echo_notes.llm import ChatCompletionClient, CompletionClient, RemoteCallFailure
from echo_notes.models import Lecture, LectureInfo
from echo_notes.services.generation import GenerationInProgress
from echo_notes.storage import InvalidCourseName, LectureExists, LectureNotFound, LectureStore

logger = logging.getLogger(__name__)

app = FastAPI(title="echo notes API", version="0.1.0")


class CourseCreateRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str = Field(min_length=1)


class TranscriptImportRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    title: str = Field(min_length=1)
    transcript: str = ""
    date: Date | None = None


class NotesUpdateRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    notes: str


class GenerateRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    chunk_size: int | None = Field(default=None, ge=1)


@app.on_event("startup")
def startup() -> None:
    configure_logging()


@app.exception_handler(InvalidCourseName)
async def invalid_course_name(request: Request, exc: InvalidCourseName) -> JSONResponse:
    logger.warning("rejected course name path=%s error=%s", request.url.path, exc)
    return JSONResponse(status_code=400, content={"detail": str(exc)})


def get_completion_client() -> CompletionClient:
    return ChatCompletionClient.from_settings(get_settings())


@lru_cache
def get_controller() -> StudyHubController:
    settings = get_settings()
    return StudyHubController(
        store=LectureStore(Path(settings.base_dir)),
        client_factory=get_completion_client,
        chunk_size=settings.summary_chunk_size,
    )


def _lecture_payload(lecture: Lecture) -> dict[str, Any]:
    return lecture.model_dump(mode="json", by_alias=True)


def _get_lecture_or_404(controller: StudyHubController, course: str, filename: str) -> Lecture:
    try:
        return controller.open_lecture(course, filename)
    except LectureNotFound as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/state")
def get_state(
    controller: Annotated[StudyHubController, Depends(get_controller)],
) -> dict[str, Any]:
    state = controller.refresh()
    selected = state.selected_lecture
    return {
        "view": state.view,
        "courses": list(state.courses),
        "current_course": state.current_course,
        "selected_date": state.selected_date.isoformat(),
        "dates_with_lectures": list(state.dates_with_lectures),
        "is_recording": state.is_recording,
        "selected_lecture_id": selected.id if selected is not None else None,
    }


@app.get("/courses")
def list_courses(
    controller: Annotated[StudyHubController, Depends(get_controller)],
) -> list[str]:
    return controller.store.list_courses()


@app.post("/courses", status_code=201)
def create_course(
    request: CourseCreateRequest,
    controller: Annotated[StudyHubController, Depends(get_controller)],
) -> dict[str, str]:
    try:
        path = controller.store.ensure_course_dir(request.name.strip())
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    controller.refresh()
    return {"name": path.name, "path": str(path)}


@app.get("/courses/{course}/lectures")
def list_course_lectures(
    course: str,
    controller: Annotated[StudyHubController, Depends(get_controller)],
) -> list[LectureInfo]:
    return controller.store.list_lectures(course)


@app.get("/dates")
def list_dates(
    controller: Annotated[StudyHubController, Depends(get_controller)],
) -> list[str]:
    return list(controller.refresh().dates_with_lectures)


@app.get("/lectures")
def lectures_for_date(
    controller: Annotated[StudyHubController, Depends(get_controller)],
    date: Date = Query(),
) -> list[LectureInfo]:
    return controller.select_date(date)


@app.post("/courses/{course}/lectures", status_code=201)
def import_lecture(
    course: str,
    request: TranscriptImportRequest,
    controller: Annotated[StudyHubController, Depends(get_controller)],
) -> dict[str, Any]:
    try:
        lecture = controller.import_transcript(
            course_name=course,
            title=request.title,
            transcript=request.transcript,
            recorded_on=request.date,
        )
    except LectureExists as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    return _lecture_payload(lecture)


@app.get("/courses/{course}/lectures/{filename}")
def get_lecture(
    course: str,
    filename: str,
    controller: Annotated[StudyHubController, Depends(get_controller)],
) -> dict[str, Any]:
    return _lecture_payload(_get_lecture_or_404(controller, course, filename))


@app.delete("/courses/{course}/lectures/{filename}", status_code=204)
def delete_lecture(
    course: str,
    filename: str,
    controller: Annotated[StudyHubController, Depends(get_controller)],
) -> Response:
    controller.delete_lecture(course, filename)
    return Response(status_code=204)


@app.post("/courses/{course}/lectures/{filename}/generate")
def generate_lecture_materials(
    course: str,
    filename: str,
    controller: Annotated[StudyHubController, Depends(get_controller)],
    request: GenerateRequest | None = None,
) -> dict[str, Any]:
    progress: list[dict[str, int]] = []

    def record_progress(current: int, total: int) -> None:
        progress.append({"chunk": current, "total": total})

    try:
        outcome = controller.generate(
            course,
            filename,
            chunk_size=request.chunk_size if request is not None else None,
            on_progress=record_progress,
        )
    except LectureNotFound as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except GenerationInProgress as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    except RemoteCallFailure as exc:
        raise HTTPException(status_code=502, detail=f"LLM request failed: {exc}") from exc

    return {
        "lecture": _lecture_payload(outcome.lecture),
        "warnings": outcome.warnings,
        "progress": progress,
    }


@app.put("/courses/{course}/lectures/{filename}/notes")
def update_notes(
    course: str,
    filename: str,
    request: NotesUpdateRequest,
    controller: Annotated[StudyHubController, Depends(get_controller)],
) -> dict[str, Any]:
    try:
        lecture = controller.save_notes(course, filename, request.notes)
    except LectureNotFound as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return _lecture_payload(lecture)


@app.post("/courses/{course}/lectures/{filename}/flashcards/{card_id}/toggle")
def toggle_flashcard(
    course: str,
    filename: str,
    card_id: str,
    controller: Annotated[StudyHubController, Depends(get_controller)],
) -> dict[str, Any]:
    try:
        lecture = controller.toggle_flashcard(course, filename, card_id)
    except LectureNotFound as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return _lecture_payload(lecture)


def run() -> None:
    import uvicorn

    configure_logging()
    uvicorn.run("echo_notes.main:app", host="127.0.0.1", port=8000, reload=False)


if __name__ == "__main__":
    run()
