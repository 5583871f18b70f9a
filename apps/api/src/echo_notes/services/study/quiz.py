from __future__ import annotations

from echo_notes.llm import CompletionClient
from echo_notes.models import QuizQuestion
from echo_notes.services.study.extraction import ExtractionResult, item_parser, run_extraction
from echo_notes.services.study.prompts import QUIZ_SYSTEM

_parse_question = item_parser(
    QuizQuestion,
    ("question", "options", "correctAnswer", "explanation"),
)


def quiz_extraction(summary_text: str, *, client: CompletionClient) -> ExtractionResult[QuizQuestion]:
    return run_extraction(
        "quiz",
        client=client,
        system_prompt=QUIZ_SYSTEM,
        notes=summary_text,
        parse_item=_parse_question,
    )


def extract_quiz(summary_text: str, *, client: CompletionClient) -> list[QuizQuestion]:
    return quiz_extraction(summary_text, client=client).items
