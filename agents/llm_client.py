from __future__ import annotations

import json
from typing import Any, Dict, List, Optional

import httpx
from pydantic import ValidationError as ShapeMismatch

from lib.errors import ExtractionError, ParseError, TransportError
from schemas.generation import RESPONSE_SHAPES, ResponseShape


DEFAULT_MAX_TOKENS = 800


def match_response_shape(payload: Any) -> Optional[ResponseShape]:
    """Return the first response shape the payload structurally satisfies, else None."""
    if not isinstance(payload, dict):
        return None
    for shape in RESPONSE_SHAPES:
        try:
            return shape.model_validate(payload)
        except ShapeMismatch:
            continue
    return None


def extract_generated_text(payload: Any) -> str:
    shape = match_response_shape(payload)
    if shape is None:
        raise ExtractionError("No extractable text in generation response", payload=payload)
    return shape.text.strip()


class ChatCompletionsClient:
    """
    Thin wrapper around an OpenAI-compatible chat-completions endpoint, spoken over plain HTTP.

    One POST per call. No retries: a network error or non-2xx status is terminal.
    An httpx.Client can be injected (tests pass one built on httpx.MockTransport);
    otherwise a short-lived client is opened per call.
    """

    def __init__(
        self,
        *,
        endpoint: str,
        api_key: str,
        timeout: float = 60.0,
        http_client: httpx.Client | None = None,
    ) -> None:
        self.endpoint = endpoint
        self._api_key = api_key
        self.timeout = timeout
        self._http = http_client

    def build_body(
        self,
        *,
        model: str,
        messages: List[Dict[str, str]],
        max_tokens: int = DEFAULT_MAX_TOKENS,
    ) -> Dict[str, Any]:
        return {
            "model": model,
            "messages": messages,
            "max_tokens": int(max_tokens),
            "stream": False,
        }

    def _headers(self) -> Dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self._api_key}",
        }

    def _post(self, body: Dict[str, Any]) -> httpx.Response:
        if self._http is not None:
            return self._http.post(self.endpoint, json=body, headers=self._headers(), timeout=self.timeout)
        with httpx.Client() as client:
            return client.post(self.endpoint, json=body, headers=self._headers(), timeout=self.timeout)

    def complete(
        self,
        *,
        model: str,
        messages: List[Dict[str, str]],
        max_tokens: int = DEFAULT_MAX_TOKENS,
    ) -> Any:
        """POST the request and return the parsed JSON body."""
        body = self.build_body(model=model, messages=messages, max_tokens=max_tokens)

        try:
            resp = self._post(body)
        except httpx.HTTPError as e:
            raise TransportError(f"Generation request failed: {e.__class__.__name__}: {e}") from e

        if not resp.is_success:
            raise TransportError(
                f"Generation endpoint returned HTTP {resp.status_code}",
                status_code=resp.status_code,
                body=resp.text,
            )

        try:
            return json.loads(resp.text)
        except json.JSONDecodeError as e:
            raise ParseError(f"Generation response is not valid JSON: {e}", body=resp.text) from e

    def generate_text(
        self,
        *,
        model: str,
        messages: List[Dict[str, str]],
        max_tokens: int = DEFAULT_MAX_TOKENS,
    ) -> str:
        return extract_generated_text(self.complete(model=model, messages=messages, max_tokens=max_tokens))
