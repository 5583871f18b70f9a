from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
import json
from typing import Any, Generic, TypeVar

T = TypeVar("T")


class MalformedResponse(ValueError):
    pass


@dataclass(frozen=True)
class DecodeResult(Generic[T]):
    value: T | None = None
    reason: str | None = None

    @property
    def ok(self) -> bool:
        return self.reason is None

    @classmethod
    def success(cls, value: T) -> DecodeResult[T]:
        return cls(value=value)

    @classmethod
    def failure(cls, reason: str) -> DecodeResult[T]:
        return cls(reason=reason)


def decode_json_array(text: str) -> DecodeResult[list[Any]]:
    """Strictly parse a model response that must be a bare JSON array."""
    try:
        parsed = json.loads(text)
    except json.JSONDecodeError as exc:
        return DecodeResult.failure(f"invalid JSON: {exc}")

    if not isinstance(parsed, list):
        return DecodeResult.failure(f"expected a JSON array, got {type(parsed).__name__}")

    return DecodeResult.success(parsed)


def decode_items(text: str, parse_item: Callable[[Any], T]) -> DecodeResult[list[T]]:
    decoded = decode_json_array(text)
    if decoded.value is None:
        return DecodeResult.failure(decoded.reason or "empty response")

    items: list[T] = []
    for position, raw_item in enumerate(decoded.value):
        try:
            items.append(parse_item(raw_item))
        except MalformedResponse as exc:
            return DecodeResult.failure(f"item {position}: {exc}")

    return DecodeResult.success(items)
