from collections.abc import Iterator
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from echo_notes.config import get_settings
from echo_notes.main import app, get_controller
from echo_notes.storage import LectureStore


@pytest.fixture(autouse=True)
def reset_api_caches() -> Iterator[None]:
    get_settings.cache_clear()
    get_controller.cache_clear()
    yield
    get_settings.cache_clear()
    get_controller.cache_clear()
    app.dependency_overrides.clear()


@pytest.fixture
def base_dir(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Path:
    path = tmp_path / "Classes"
    monkeypatch.setenv("ECHO_BASE_DIR", str(path))
    return path


@pytest.fixture
def store(base_dir: Path) -> LectureStore:
    return LectureStore(base_dir)


@pytest.fixture
def client(base_dir: Path) -> Iterator[TestClient]:
    with TestClient(app) as test_client:
        yield test_client
