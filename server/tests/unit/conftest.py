"""Unit test fixtures: SQL files on disk and a mock asyncpg pool."""

# Standard Library
import os
import sys
from pathlib import Path
from unittest.mock import AsyncMock

# Third-Party
import pytest

# Ensure source is importable
SRC_DIR = Path(__file__).resolve().parents[2] / "src"
sys.path.insert(0, str(SRC_DIR))


def _bump_mtime(path: Path, seconds: int = 10) -> None:
    stat = path.stat()
    os.utime(path, ns=(stat.st_atime_ns, stat.st_mtime_ns + seconds * 1_000_000_000))


@pytest.fixture
def bump_mtime():
    """Move a file's modification time forward so a reload is detectable."""

    return _bump_mtime


@pytest.fixture
def sql_file(tmp_path):
    """A SQL file containing a single query."""

    path = tmp_path / "query.sql"
    path.write_text("SELECT * FROM users WHERE id = $1", encoding="utf-8")
    return path


@pytest.fixture
def mock_pool():
    """AsyncMock of asyncpg.Pool for unit tests."""

    pool = AsyncMock()
    pool.fetch = AsyncMock(return_value=[])
    return pool
