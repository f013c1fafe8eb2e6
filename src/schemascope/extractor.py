"""Schema source files: enumeration, reading and extraction.

This is the only layer that touches the file system. The engine in
``schemascope.sql_schema`` receives text and never sees a path.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from .sql_schema import ParsedSchema, parse_schema

logger = logging.getLogger(__name__)

DEFAULT_EXTENSION = ".sql"
DEFAULT_MAX_FILE_BYTES = 5 * 1024 * 1024


@dataclass(frozen=True)
class SchemaSource:
    """A schema file available for parsing."""
    name: str
    filename: str
    path: str
    size: int
    modified: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "filename": self.filename,
            "path": self.path,
            "size": self.size,
            "modified": self.modified.isoformat(),
        }


def scan_sql_files(directory: Path | str, extension: str = DEFAULT_EXTENSION) -> list[SchemaSource]:
    """List schema files directly inside a directory.

    Args:
        directory: Folder holding the schema files
        extension: File suffix to include (case-insensitive)

    Returns:
        SchemaSource list sorted by filename; empty when the folder is missing
    """
    directory = Path(directory)

    if not directory.is_dir():
        logger.warning(f"Schema directory not found: {directory}")
        return []

    sources = []
    for item in sorted(directory.iterdir(), key=lambda p: p.name):
        if not item.is_file() or item.suffix.lower() != extension.lower():
            continue
        stat = item.stat()
        sources.append(SchemaSource(
            name=item.stem,
            filename=item.name,
            path=str(Path(directory.name) / item.name),
            size=stat.st_size,
            modified=datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc),
        ))

    return sources


def resolve_schema_path(
    directory: Path | str,
    name: str,
    extension: str = DEFAULT_EXTENSION,
) -> Path:
    """Path of ``<name><extension>`` inside directory.

    Raises:
        ValueError: If name is empty or would escape the directory
    """
    if not name or name in (".", "..") or "/" in name or "\\" in name:
        raise ValueError(f"Invalid schema name: {name!r}")

    filename = name if name.lower().endswith(extension.lower()) else f"{name}{extension}"
    return Path(directory) / filename


def read_schema_text(path: Path | str, max_bytes: int = DEFAULT_MAX_FILE_BYTES) -> str:
    """Read a schema file, refusing files above max_bytes.

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the file is larger than max_bytes
    """
    path = Path(path)

    if not path.is_file():
        raise FileNotFoundError(f"Schema file not found: {path}")

    size = path.stat().st_size
    if size > max_bytes:
        raise ValueError(f"Schema file too large: {path} ({size} bytes, limit {max_bytes})")

    return path.read_text(encoding="utf-8", errors="replace")


def read_schema_file(
    directory: Path | str,
    name: str,
    max_bytes: int = DEFAULT_MAX_FILE_BYTES,
    extension: str = DEFAULT_EXTENSION,
) -> str:
    """Read ``<name>.sql`` from the schema directory."""
    return read_schema_text(resolve_schema_path(directory, name, extension), max_bytes)


def extract_schema_from_file(
    directory: Path | str,
    name: str,
    max_bytes: int = DEFAULT_MAX_FILE_BYTES,
    extension: str = DEFAULT_EXTENSION,
) -> ParsedSchema:
    """Read and parse one schema file by name."""
    content = read_schema_file(directory, name, max_bytes, extension)
    schema = parse_schema(content)
    logger.info(
        f"Extracted from {name}: {schema.stats.total_tables} tables, "
        f"{schema.stats.total_rls_policies} policies"
    )
    return schema
