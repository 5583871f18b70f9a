from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
import logging
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ValidationError

from echo_notes.llm import CompletionClient
from echo_notes.services.study.decode import MalformedResponse, decode_items

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


@dataclass(frozen=True)
class ExtractionResult(Generic[ModelT]):
    items: list[ModelT] = field(default_factory=list)
    warning: str | None = None


def item_parser(model: type[ModelT], fields: tuple[str, ...]) -> Callable[[Any], ModelT]:
    """Build a parser that validates one JSON object against ``model``.

    Only ``fields`` are read from the object; anything else the model sent
    (including its own ids) is dropped so every item gets a fresh id.
    """

    def parse(raw_item: Any) -> ModelT:
        if not isinstance(raw_item, dict):
            raise MalformedResponse(f"expected an object, got {type(raw_item).__name__}")
        try:
            return model.model_validate(
                {name: raw_item.get(name) for name in fields},
                strict=True,
            )
        except ValidationError as exc:
            raise MalformedResponse(
                f"{exc.error_count()} invalid field(s): {exc.errors()[0]['msg']}"
            ) from exc

    return parse


def run_extraction(
    kind: str,
    *,
    client: CompletionClient,
    system_prompt: str,
    notes: str,
    parse_item: Callable[[Any], ModelT],
) -> ExtractionResult[ModelT]:
    try:
        response = client.complete(system_prompt=system_prompt, user_prompt=notes)
    except Exception as exc:
        logger.warning("%s extraction request failed error=%r", kind, exc)
        return ExtractionResult(warning=f"{kind} unavailable: request failed ({exc})")

    decoded = decode_items(response, parse_item)
    if decoded.value is None:
        logger.warning(
            "%s extraction returned malformed output reason=%s head=%r",
            kind,
            decoded.reason,
            response[:200],
        )
        return ExtractionResult(warning=f"{kind} unavailable: {decoded.reason}")

    logger.info("%s extraction completed items=%d", kind, len(decoded.value))
    return ExtractionResult(items=decoded.value)
