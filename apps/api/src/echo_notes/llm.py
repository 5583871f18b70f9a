from __future__ import annotations

from typing import Protocol

import httpx

from echo_notes.config import Settings


class RemoteCallFailure(RuntimeError):
    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        chunk_index: int | None = None,
        total_chunks: int | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.chunk_index = chunk_index
        self.total_chunks = total_chunks


class CompletionClient(Protocol):
    def complete(self, *, system_prompt: str, user_prompt: str) -> str: ...


class ChatCompletionClient:
    def __init__(
        self,
        *,
        base_url: str,
        model: str,
        api_key: str | None = None,
        temperature: float = 0.3,
        max_tokens: int = 2048,
        timeout_seconds: float = 120.0,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._model = model
        self._api_key = api_key
        self._temperature = temperature
        self._max_tokens = max_tokens
        self._timeout_seconds = timeout_seconds

    @classmethod
    def from_settings(cls, settings: Settings) -> ChatCompletionClient:
        return cls(
            base_url=settings.llm_base_url,
            model=settings.llm_model,
            api_key=settings.llm_api_key,
            temperature=settings.llm_temperature,
            max_tokens=settings.llm_max_tokens,
            timeout_seconds=settings.llm_timeout_seconds,
        )

    @property
    def model(self) -> str:
        return self._model

    def complete(self, *, system_prompt: str, user_prompt: str) -> str:
        try:
            return self._chat_completion(system_prompt=system_prompt, user_prompt=user_prompt)
        except httpx.HTTPStatusError as exc:
            response = exc.response
            raise RemoteCallFailure(
                f"LLM API error: {response.status_code} {response.reason_phrase}",
                status_code=response.status_code,
            ) from exc
        except (httpx.HTTPError, ValueError) as exc:
            raise RemoteCallFailure(str(exc)) from exc

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"
        return headers

    def _chat_completion(self, *, system_prompt: str, user_prompt: str) -> str:
        response = httpx.post(
            f"{self._base_url}/chat/completions",
            json={
                "model": self._model,
                "messages": [
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                "temperature": self._temperature,
                "max_tokens": self._max_tokens,
            },
            headers=self._headers(),
            timeout=self._timeout_seconds,
        )
        response.raise_for_status()

        payload = response.json()
        choices = payload.get("choices") if isinstance(payload, dict) else None
        if not isinstance(choices, list) or not choices:
            raise ValueError("Invalid chat completion payload: missing choices")

        message = choices[0].get("message") if isinstance(choices[0], dict) else None
        content = message.get("content") if isinstance(message, dict) else None
        if not isinstance(content, str):
            raise ValueError("Invalid chat completion payload: missing assistant content")

        return content
