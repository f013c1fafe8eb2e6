"""Streaming chat client for an Anthropic-style messages API.

Usage:
    from schemascope.llm import stream_chat

    async for text in stream_chat(messages, system_prompt, config.chat):
        print(text, end="")
"""
from __future__ import annotations

import json
import logging
from typing import Any, AsyncIterator, Iterable

import httpx

from schemascope.config import ChatConfig

logger = logging.getLogger(__name__)


class ChatProviderError(Exception):
    """Chat provider unavailable or rejected the request."""

    def __init__(self, message: str, status_code: int = 502) -> None:
        super().__init__(message)
        self.status_code = status_code


def build_payload(
    messages: Iterable[dict[str, str]],
    system_prompt: str,
    config: ChatConfig,
) -> dict[str, Any]:
    """Request body for the messages endpoint; only role and content are forwarded."""
    return {
        "model": config.model,
        "max_tokens": config.max_tokens,
        "system": system_prompt,
        "messages": [
            {"role": m["role"], "content": m["content"]}
            for m in messages
        ],
        "stream": True,
    }


def parse_sse_line(line: str) -> str | None:
    """Text carried by one server-sent-events line, if any.

    Only ``content_block_delta`` events carry text; malformed JSON is ignored.
    """
    if not line.startswith("data: "):
        return None

    data = line[len("data: "):]
    if data == "[DONE]":
        return None

    try:
        event = json.loads(data)
    except json.JSONDecodeError:
        return None

    if not isinstance(event, dict) or event.get("type") != "content_block_delta":
        return None
    return (event.get("delta") or {}).get("text") or None


async def stream_chat(
    messages: Iterable[dict[str, str]],
    system_prompt: str,
    config: ChatConfig,
    transport: httpx.AsyncBaseTransport | None = None,
) -> AsyncIterator[str]:
    """Stream assistant text deltas from the chat provider.

    Args:
        messages: Conversation so far, dicts with role and content
        system_prompt: Rendered system prompt
        config: Chat section of the app config
        transport: Optional httpx transport (tests inject a mock)

    Yields:
        Text fragments in arrival order

    Raises:
        ChatProviderError: If no API key is configured or the provider
            answers with an error status
    """
    if not config.api_key:
        raise ChatProviderError("Chat API key not configured", status_code=500)

    payload = build_payload(messages, system_prompt, config)
    headers = {
        "Content-Type": "application/json",
        "x-api-key": config.api_key,
        "anthropic-version": config.api_version,
    }

    logger.debug(f"Calling {config.provider}/{config.model} with {len(payload['messages'])} messages")

    async with httpx.AsyncClient(timeout=config.timeout, transport=transport) as client:
        async with client.stream(
            "POST", f"{config.base_url}/v1/messages", headers=headers, json=payload
        ) as response:
            if response.status_code >= 400:
                error_body = await response.aread()
                logger.warning(
                    f"Chat provider error {response.status_code}: "
                    f"{error_body.decode('utf-8', errors='replace')[:500]}"
                )
                raise ChatProviderError(
                    "Failed to get response from chat provider",
                    status_code=response.status_code,
                )

            async for line in response.aiter_lines():
                text = parse_sse_line(line)
                if text:
                    yield text
