from __future__ import annotations

import logging

from echo_notes.config import get_settings
from echo_notes.llm import CompletionClient, RemoteCallFailure
from echo_notes.services.notes.chunker import split_into_chunks
from echo_notes.services.notes.prompts import (
    NO_TRANSCRIPT_SUMMARY,
    ROLLING_SUMMARY_SYSTEM,
    build_rolling_summary_prompt,
)
from echo_notes.services.notes.types import ProgressCallback

logger = logging.getLogger(__name__)


def _no_progress(current: int, total: int) -> None:
    del current, total


def _notify(on_progress: ProgressCallback, current: int, total: int) -> None:
    try:
        on_progress(current, total)
    except Exception as exc:
        logger.warning("progress observer failed chunk=%d/%d error=%r", current, total, exc)


def reduce_to_summary(
    transcript: str,
    *,
    client: CompletionClient,
    chunk_size: int | None = None,
    on_progress: ProgressCallback | None = None,
) -> str:
    """Fold the transcript chunk by chunk into one rolling summary.

    Each remote call receives the summary produced so far plus the next chunk
    and answers with a full replacement summary. The first failing call aborts
    the fold with a RemoteCallFailure naming the chunk and chained to whatever
    the client raised; no partial summary is ever returned.
    """
    if not transcript or not transcript.strip():
        return NO_TRANSCRIPT_SUMMARY

    resolved_chunk_size = chunk_size if chunk_size is not None else get_settings().summary_chunk_size
    observer = on_progress or _no_progress
    chunks = split_into_chunks(transcript, resolved_chunk_size)

    running_summary = ""
    for chunk in chunks:
        _notify(observer, chunk.index, chunk.total)
        logger.info(
            "summary chunk started chunk=%d/%d words=%d",
            chunk.index,
            chunk.total,
            chunk.word_count,
        )

        try:
            running_summary = client.complete(
                system_prompt=ROLLING_SUMMARY_SYSTEM,
                user_prompt=build_rolling_summary_prompt(running_summary, chunk.text),
            )
        except Exception as exc:
            logger.error(
                "summary aborted chunk=%d/%d error=%r",
                chunk.index,
                chunk.total,
                exc,
            )
            raise RemoteCallFailure(
                f"summary failed at chunk {chunk.index}/{chunk.total}: {exc}",
                status_code=exc.status_code if isinstance(exc, RemoteCallFailure) else None,
                chunk_index=chunk.index,
                total_chunks=chunk.total,
            ) from exc

    logger.info("summary completed chunks=%d chars=%d", len(chunks), len(running_summary))
    return running_summary
