"""Chat proxy for questions about a parsed schema.

Usage:
    from schemascope.llm import build_system_prompt, stream_chat

    prompt = build_system_prompt(context, current_table="posts", mode="developer")
    async for text in stream_chat(messages, prompt, config.chat):
        ...
"""
from .client import (
    ChatProviderError,
    build_payload,
    parse_sse_line,
    stream_chat,
)
from .prompts import (
    ChatMode,
    build_system_prompt,
)

__all__ = [
    "ChatProviderError",
    "build_payload",
    "parse_sse_line",
    "stream_chat",
    "ChatMode",
    "build_system_prompt",
]
