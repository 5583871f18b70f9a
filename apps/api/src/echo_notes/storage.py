from __future__ import annotations

from collections.abc import Callable, Iterator
from contextlib import contextmanager
import logging
import os
from pathlib import Path
import re
import threading
import time
from uuid import uuid4
from weakref import WeakValueDictionary

from pydantic import ValidationError

from echo_notes.models import Lecture, LectureInfo

logger = logging.getLogger(__name__)

AUDIO_EXTENSION = ".webm"
SIDECAR_EXTENSION = ".json"
RECORDING_COURSE_ALIASES = {"Classes": "General"}

_UNSAFE_TITLE_CHARS = re.compile(r"[^a-zA-Z0-9_\-\s]")
_WHITESPACE = re.compile(r"\s+")


class LectureNotFound(LookupError):
    pass


class LectureExists(FileExistsError):
    pass


class InvalidCourseName(ValueError):
    pass


def validate_course_name(course_name: str) -> str:
    """Return ``course_name`` if it names a single directory below the store root."""
    if (
        not course_name.strip()
        or course_name in {".", ".."}
        or "/" in course_name
        or "\\" in course_name
        or "\x00" in course_name
    ):
        raise InvalidCourseName(f"Invalid course name: {course_name!r}")
    return course_name


def sanitize_title(title: str) -> str:
    return _WHITESPACE.sub("_", _UNSAFE_TITLE_CHARS.sub("", title).strip())


def lecture_filename(date: str, title: str) -> str:
    return f"{date}_{sanitize_title(title)}"


def _split_stem(stem: str) -> tuple[str, str]:
    date, _, title = stem.partition("_")
    return date, title


class LectureStore:
    """Lecture recordings and their JSON sidecars under ``<base_dir>/<course>/``."""

    def __init__(self, base_dir: Path) -> None:
        self._base_dir = base_dir
        self._locks: WeakValueDictionary[Path, threading.Lock] = WeakValueDictionary()
        self._locks_guard = threading.Lock()

    @property
    def base_dir(self) -> Path:
        return self._base_dir

    def course_dir(self, course_name: str) -> Path:
        return self._base_dir / validate_course_name(course_name)

    def ensure_course_dir(self, course_name: str) -> Path:
        path = self.course_dir(course_name)
        path.mkdir(parents=True, exist_ok=True)
        return path

    def sidecar_path(self, audio_path: str | Path, course_name: str) -> Path:
        stem = Path(str(audio_path).replace("\\", "/")).stem
        return self.course_dir(course_name) / f"{stem}{SIDECAR_EXTENSION}"

    def audio_path_for(self, course_name: str, filename: str) -> Path:
        return self.course_dir(course_name) / f"{Path(filename).stem}{AUDIO_EXTENSION}"

    # --- sidecar records ---

    def save(self, lecture: Lecture) -> Path:
        path = self.sidecar_path(lecture.audio_path, lecture.course_name)
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = path.with_name(f"{path.name}.{uuid4().hex}.tmp")

        try:
            tmp_path.write_text(lecture.to_json(), encoding="utf-8")
            os.replace(tmp_path, path)
        finally:
            if tmp_path.exists():
                tmp_path.unlink()

        logger.info("lecture saved id=%s path=%s", lecture.id, path)
        return path

    def load(self, audio_path: str | Path, course_name: str) -> Lecture | None:
        path = self.sidecar_path(audio_path, course_name)
        if not path.exists():
            return None

        try:
            return Lecture.model_validate_json(path.read_text(encoding="utf-8"))
        except (OSError, ValidationError) as exc:
            logger.warning("lecture sidecar unreadable path=%s error=%s", path, exc)
            return None

    def get(self, course_name: str, filename: str) -> Lecture:
        lecture = self.load(self.audio_path_for(course_name, filename), course_name)
        if lecture is None:
            raise LectureNotFound(f"Lecture not found: {course_name}/{filename}")
        return lecture

    def delete(self, audio_path: str | Path, course_name: str) -> None:
        sidecar = self.sidecar_path(audio_path, course_name)
        audio = sidecar.with_suffix(AUDIO_EXTENSION)
        for path in (sidecar, audio):
            path.unlink(missing_ok=True)
        logger.info("lecture files removed path=%s", sidecar.with_suffix(""))

    @contextmanager
    def _locked(self, path: Path) -> Iterator[None]:
        with self._locks_guard:
            lock = self._locks.get(path)
            if lock is None:
                lock = threading.Lock()
                self._locks[path] = lock
        with lock:
            yield

    def update(
        self,
        audio_path: str | Path,
        course_name: str,
        mutate: Callable[[Lecture], Lecture],
    ) -> Lecture:
        """Apply ``mutate`` to the freshest stored record and persist the result.

        Updates to the same sidecar are serialized, so each one sees the
        previous one's write.
        """
        path = self.sidecar_path(audio_path, course_name)
        with self._locked(path):
            current = self.load(audio_path, course_name)
            if current is None:
                raise LectureNotFound(f"Lecture not found: {path}")
            updated = mutate(current)
            self.save(updated)
        return updated

    # --- creation ---

    def create(self, lecture: Lecture, audio: bytes | None = None) -> Path:
        """Persist a new lecture, refusing to replace one stored under the same file name."""
        path = self.sidecar_path(lecture.audio_path, lecture.course_name)
        audio_path = path.with_suffix(AUDIO_EXTENSION)
        path.parent.mkdir(parents=True, exist_ok=True)
        with self._locked(path):
            if path.exists() or audio_path.exists():
                raise LectureExists(f"Lecture already exists: {lecture.course_name}/{path.stem}")
            if audio is not None:
                audio_path.write_bytes(audio)
            return self.save(lecture)

    def save_recording(
        self,
        *,
        course_name: str,
        date: str,
        audio: bytes,
        transcript: str,
        duration_seconds: float,
        title: str | None = None,
    ) -> Lecture:
        """Store a finished recording.

        A recording is never dropped: if the file name is taken, a numeric
        suffix is appended to the stem.
        """
        course = RECORDING_COURSE_ALIASES.get(course_name, course_name)
        resolved_title = title or f"Lecture_{int(time.time() * 1000)}"
        course_dir = self.ensure_course_dir(course)
        base_stem = lecture_filename(date, resolved_title)
        stem = base_stem
        attempt = 1

        while True:
            lecture = Lecture(
                course_id=course,
                course_name=course,
                date=date,
                title=resolved_title,
                audio_path=str(course_dir / f"{stem}{AUDIO_EXTENSION}"),
                duration=max(1, int(duration_seconds)),
                transcript=transcript,
            )
            try:
                self.create(lecture, audio)
            except LectureExists:
                logger.info("recording name taken stem=%s", stem)
                attempt += 1
                stem = f"{base_stem}_{attempt}"
                continue
            return lecture

    def import_transcript(
        self,
        *,
        course_name: str,
        date: str,
        title: str,
        transcript: str,
    ) -> Lecture:
        course_dir = self.ensure_course_dir(course_name)
        lecture = Lecture(
            course_id=course_name,
            course_name=course_name,
            date=date,
            title=title,
            audio_path=str(course_dir / f"{lecture_filename(date, title)}{AUDIO_EXTENSION}"),
            transcript=transcript,
        )
        self.create(lecture)
        return lecture

    # --- listings ---

    def list_courses(self) -> list[str]:
        if not self._base_dir.exists():
            return []
        return sorted(path.name for path in self._base_dir.iterdir() if path.is_dir())

    def list_lectures(self, course_name: str) -> list[LectureInfo]:
        course_dir = self.course_dir(course_name)
        if not course_dir.is_dir():
            return []

        by_stem: dict[str, Path] = {}
        for path in course_dir.iterdir():
            if not path.is_file():
                continue
            if path.suffix == AUDIO_EXTENSION:
                by_stem[path.stem] = path
            elif path.suffix == SIDECAR_EXTENSION:
                by_stem.setdefault(path.stem, path.with_suffix(AUDIO_EXTENSION))

        lectures: list[LectureInfo] = []
        for stem, path in by_stem.items():
            date, title = _split_stem(stem)
            lectures.append(LectureInfo(filename=stem, date=date, title=title, path=str(path)))

        lectures.sort(key=lambda info: info.date, reverse=True)
        return lectures

    def lectures_for_date(self, date: str) -> list[LectureInfo]:
        matches: list[LectureInfo] = []
        for course_name in self.list_courses():
            for info in self.list_lectures(course_name):
                if info.date != date:
                    continue
                matches.append(info.model_copy(update={"title": f"{course_name} - {info.title}"}))

        matches.sort(key=lambda info: info.filename, reverse=True)
        return matches

    def dates_with_lectures(self) -> list[str]:
        dates: list[str] = []
        for course_name in self.list_courses():
            for info in self.list_lectures(course_name):
                if info.date not in dates:
                    dates.append(info.date)
        return dates
