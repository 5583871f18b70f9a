from echo_notes.services.notes.chunker import split_into_chunks
from echo_notes.services.notes.prompts import EMPTY_SUMMARY_MARKER, NO_TRANSCRIPT_SUMMARY
from echo_notes.services.notes.summary import reduce_to_summary
from echo_notes.services.notes.types import ProgressCallback, TranscriptChunk

__all__ = [
    "EMPTY_SUMMARY_MARKER",
    "NO_TRANSCRIPT_SUMMARY",
    "ProgressCallback",
    "TranscriptChunk",
    "reduce_to_summary",
    "split_into_chunks",
]
