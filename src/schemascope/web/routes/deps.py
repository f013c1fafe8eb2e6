"""Shared FastAPI dependencies."""
from __future__ import annotations

import logging

from fastapi import HTTPException, Request

from schemascope.config import AppConfig
from schemascope.extractor import extract_schema_from_file
from schemascope.sql_schema import ParsedSchema

logger = logging.getLogger(__name__)


def get_config(request: Request) -> AppConfig:
    """Config the application was created with."""
    return request.app.state.config


def load_schema_or_error(name: str, config: AppConfig) -> ParsedSchema:
    """Parse a schema file by name, mapping failures to HTTP errors."""
    sources = config.sources
    try:
        return extract_schema_from_file(
            sources.directory, name, sources.max_file_bytes, sources.extension
        )
    except FileNotFoundError:
        raise HTTPException(status_code=404, detail="Database file not found")
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception:
        logger.exception(f"Error parsing database file {name}")
        raise HTTPException(status_code=500, detail="Failed to parse database file")
