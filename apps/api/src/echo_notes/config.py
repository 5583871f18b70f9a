from dataclasses import dataclass
from functools import lru_cache
import logging
import os
from pathlib import Path


def _to_int(value: str | None, *, default: int, minimum: int) -> int:
    if value is None:
        return default
    parsed = int(value)
    return max(minimum, parsed)


def _to_float(value: str | None, *, default: float, minimum: float) -> float:
    if value is None:
        return default
    parsed = float(value)
    return max(minimum, parsed)


def _default_base_dir() -> str:
    return str(Path.home() / "Documents" / "echo" / "Classes")


@dataclass(frozen=True)
class Settings:
    base_dir: str
    default_course: str
    llm_base_url: str
    llm_api_key: str | None
    llm_model: str
    llm_temperature: float
    llm_max_tokens: int
    llm_timeout_seconds: float
    summary_chunk_size: int
    log_level: str


@lru_cache
def get_settings() -> Settings:
    return Settings(
        base_dir=os.getenv("ECHO_BASE_DIR", _default_base_dir()),
        default_course=os.getenv("ECHO_DEFAULT_COURSE", "General"),
        llm_base_url=os.getenv("LLM_BASE_URL", "https://api.studio.nebius.ai/v1"),
        llm_api_key=os.getenv("LLM_API_KEY") or None,
        llm_model=os.getenv("LLM_MODEL", "meta-llama/Meta-Llama-3.1-8B-Instruct-fast"),
        llm_temperature=_to_float(os.getenv("LLM_TEMPERATURE"), default=0.3, minimum=0.0),
        llm_max_tokens=_to_int(os.getenv("LLM_MAX_TOKENS"), default=2048, minimum=1),
        llm_timeout_seconds=_to_float(os.getenv("LLM_TIMEOUT_SECONDS"), default=120.0, minimum=1.0),
        summary_chunk_size=_to_int(os.getenv("SUMMARY_CHUNK_SIZE"), default=1000, minimum=1),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )


def configure_logging(level: str | None = None) -> None:
    resolved = (level or get_settings().log_level).upper()
    logging.basicConfig(
        level=getattr(logging, resolved, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(message)s",
    )
