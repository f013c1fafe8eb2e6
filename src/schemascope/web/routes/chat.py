"""Chat proxy API route."""
from __future__ import annotations

import logging
from typing import AsyncIterator, Literal, Optional

import httpx
from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import StreamingResponse
from pydantic import BaseModel, ConfigDict, Field

from schemascope.config import AppConfig
from schemascope.llm import ChatMode, ChatProviderError, build_system_prompt, stream_chat
from schemascope.sql_schema import build_schema_context

from .deps import get_config, load_schema_or_error

logger = logging.getLogger(__name__)

router = APIRouter()


# =============================================================================
# Request Models
# =============================================================================

class ChatMessage(BaseModel):
    """One conversation turn."""
    role: Literal["user", "assistant"]
    content: str


class ChatRequest(BaseModel):
    """Chat turn request.

    ``schema`` carries an already linearized schema; ``database`` names a
    schema file to linearize server-side when ``schema`` is empty.
    """
    model_config = ConfigDict(populate_by_name=True)

    messages: list[ChatMessage] = Field(..., min_length=1)
    schema_context: str = Field("", alias="schema")
    database: Optional[str] = None
    current_table: Optional[str] = Field(None, alias="currentTable")
    mode: ChatMode = "developer"


@router.post("/chat")
async def chat(
    body: ChatRequest,
    request: Request,
    config: AppConfig = Depends(get_config),
) -> StreamingResponse:
    """Stream the assistant's reply as plain text."""
    schema_text = body.schema_context
    if not schema_text and body.database:
        schema_text = build_schema_context(load_schema_or_error(body.database, config))

    system_prompt = build_system_prompt(schema_text, body.current_table, body.mode)
    chunks = stream_chat(
        [m.model_dump() for m in body.messages],
        system_prompt,
        config.chat,
        transport=request.app.state.chat_transport,
    )

    # Pull the first chunk eagerly so provider errors become HTTP errors
    # instead of a truncated 200 stream.
    try:
        first = await chunks.__anext__()
    except StopAsyncIteration:
        first = ""
    except ChatProviderError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    except httpx.HTTPError as e:
        logger.warning(f"Chat provider unreachable: {e}")
        raise HTTPException(status_code=502, detail="Failed to reach chat provider")

    async def relay() -> AsyncIterator[str]:
        if first:
            yield first
        async for text in chunks:
            yield text

    return StreamingResponse(relay(), media_type="text/plain; charset=utf-8")
