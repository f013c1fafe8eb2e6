"""Schema file API routes."""
from __future__ import annotations

from pathlib import Path
from typing import Any

from fastapi import APIRouter, Depends

from schemascope.config import AppConfig
from schemascope.extractor import scan_sql_files
from schemascope.sql_schema import build_schema_context, find_schema_warnings

from .deps import get_config, load_schema_or_error

router = APIRouter()


@router.get("/databases")
async def list_databases(config: AppConfig = Depends(get_config)) -> dict[str, Any]:
    """List schema files in the configured folder."""
    directory = Path(config.sources.directory)
    if not directory.is_dir():
        return {"databases": [], "error": "No database folder found"}

    sources = scan_sql_files(directory, config.sources.extension)
    return {"databases": [s.to_dict() for s in sources]}


@router.get("/databases/{name}")
async def get_database(name: str, config: AppConfig = Depends(get_config)) -> dict[str, Any]:
    """Parsed tables and stats for one schema file."""
    schema = load_schema_or_error(name, config)
    result = schema.to_dict()
    result["filename"] = name
    return result


@router.get("/databases/{name}/warnings")
async def get_database_warnings(name: str, config: AppConfig = Depends(get_config)) -> dict[str, Any]:
    """Schema warnings (missing keys, RLS gaps, isolated tables)."""
    schema = load_schema_or_error(name, config)
    return {
        "filename": name,
        "warnings": [w.to_dict() for w in find_schema_warnings(schema)],
    }


@router.get("/databases/{name}/context")
async def get_database_context(name: str, config: AppConfig = Depends(get_config)) -> dict[str, Any]:
    """Linearized schema text used as chat context."""
    schema = load_schema_or_error(name, config)
    return {"filename": name, "context": build_schema_context(schema)}
