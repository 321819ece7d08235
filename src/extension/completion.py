"""Single round trip to the chat-completion endpoint."""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Iterator, List, Optional

import httpx

from src.extension.ai_client import AIClient


logger = logging.getLogger(__name__)


class CompletionError(Exception):
    """Base error for failures while obtaining a completion."""


class CompletionParseError(CompletionError):
    """Raised when the response body is not a sequence of completion documents."""


def build_request_body(model: str, query: str) -> Dict[str, Any]:
    """Return the JSON body for a single-message chat-completion request."""

    return {"model": model, "messages": [{"role": "user", "content": query}]}


def build_headers(credential: str) -> Dict[str, str]:
    return {
        "Content-Type": "application/json",
        "Authorization": f"Bearer {credential}".rstrip(),
    }


class CompletionStreamParser:
    """Incrementally decode concatenated JSON documents from a text stream.

    Chunks may split a document anywhere, including inside a string or a
    multi-byte character already decoded by the transport. Documents are
    separated by whitespace (usually newlines). A pretty-printed body counts
    as one document even though it spans many lines.
    """

    def __init__(self) -> None:
        self._decoder = json.JSONDecoder()
        self._buffer = ""

    def feed(self, chunk: str) -> Iterator[Any]:
        """Add ``chunk`` to the buffer and yield every document it completes."""

        self._buffer += chunk
        while True:
            stripped = self._buffer.lstrip()
            if not stripped:
                self._buffer = ""
                return
            try:
                document, end = self._decoder.raw_decode(stripped)
            except json.JSONDecodeError:
                self._buffer = stripped
                return
            self._buffer = stripped[end:]
            yield document

    def close(self) -> None:
        """Fail when the stream ended in the middle of a document."""

        leftover = self._buffer.strip()
        self._buffer = ""
        if leftover:
            raise CompletionParseError(f"Response ended with an incomplete JSON document: {leftover[:80]!r}")


def extract_text(document: Any) -> str:
    """Return the text carried by one decoded response document.

    An ``error.message`` is surfaced verbatim. Otherwise the first choice's
    ``message.content`` (or ``delta.content`` for streamed chunks) is used.
    """

    if not isinstance(document, dict):
        raise CompletionParseError(f"Expected a JSON object, got {type(document).__name__}")

    error = document.get("error")
    if error is not None:
        if isinstance(error, dict) and isinstance(error.get("message"), str):
            return error["message"]
        if isinstance(error, str):
            return error
        raise CompletionParseError("Error object without a message")

    choices = document.get("choices")
    if not isinstance(choices, list) or not choices:
        raise CompletionParseError("Response has neither 'error' nor 'choices'")

    first = choices[0] if isinstance(choices[0], dict) else {}
    payload = first.get("message") or first.get("delta") or {}
    content = payload.get("content") if isinstance(payload, dict) else None
    return content if isinstance(content, str) else ""


async def request_completion(
    ai_client: AIClient,
    query: str,
    credential: str,
    http_client: Optional[httpx.AsyncClient] = None,
) -> str:
    """POST ``query`` to the configured endpoint and return the completion text.

    Non-2xx responses are not raised: the provider reports problems such as a
    rejected credential in an ``error`` object, and that message becomes the
    completion text. Transport failures propagate as ``httpx.HTTPError``.
    """

    body = build_request_body(ai_client.model, query)
    headers = build_headers(credential)
    owns_client = http_client is None
    client = http_client or httpx.AsyncClient(timeout=ai_client.timeout)

    logger.info(
        "Requesting completion",
        extra={"endpoint": ai_client.endpoint, "model": ai_client.model, "query_length": len(query)},
    )
    try:
        parser = CompletionStreamParser()
        parts: List[str] = []
        async with client.stream("POST", ai_client.endpoint, json=body, headers=headers) as response:
            if response.is_error:
                logger.warning(
                    "Chat service returned an error status",
                    extra={"status_code": response.status_code},
                )
            async for chunk in response.aiter_text():
                for document in parser.feed(chunk):
                    parts.append(extract_text(document))
        parser.close()
    finally:
        if owns_client:
            await client.aclose()

    completion = "".join(parts)
    logger.info("Completion received", extra={"completion_length": len(completion)})
    return completion
