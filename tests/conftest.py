"""Shared pytest fixtures for all tests."""
import shutil
from pathlib import Path

import pytest

from schemascope.config import AppConfig, ChatConfig, SourcesConfig

FIXTURES_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture(scope="session")
def blog_sql() -> str:
    """Blog schema with tables, foreign keys and RLS policies."""
    return (FIXTURES_DIR / "database" / "blog.sql").read_text()


@pytest.fixture
def schema_dir(tmp_path):
    """Temporary schema folder holding a copy of blog.sql."""
    directory = tmp_path / "database"
    directory.mkdir()
    shutil.copy(FIXTURES_DIR / "database" / "blog.sql", directory / "blog.sql")
    return directory


@pytest.fixture
def app_config(schema_dir):
    """App config pointing at the temporary schema folder."""
    return AppConfig(
        sources=SourcesConfig(directory=str(schema_dir)),
        chat=ChatConfig(api_key="test-key", model="test-model"),
    )
