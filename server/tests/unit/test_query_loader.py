"""Unit tests for the SQL query loader."""

# Standard Library
from pathlib import Path

import pytest

from pgquery.config import QueryFileOptions
from pgquery.errors import QueryFileError
from pgquery.query_file import QueryFile, QueryLoader

pytestmark = pytest.mark.unit


# --- QueryLoader Tests ---


class TestQueryLoader:
    """Tests for the QueryLoader class."""

    def test_load_existing_query(self, tmp_path):
        """Load a SQL file from the base directory."""

        sql_file = tmp_path / "my_query.sql"
        sql_file.write_text("SELECT 1;", encoding="utf-8")

        loader = QueryLoader(tmp_path)
        assert isinstance(loader["my_query"], QueryFile)
        assert loader["my_query"].query == "SELECT 1;"

    def test_load_nested_path(self, tmp_path):
        """Load a SQL file from a nested subdirectory."""

        subdir = tmp_path / "entities"
        subdir.mkdir()
        sql_file = subdir / "create.sql"
        sql_file.write_text("INSERT INTO entities;", encoding="utf-8")

        loader = QueryLoader(tmp_path)
        assert loader["entities/create"].query == "INSERT INTO entities;"

    def test_same_instance_per_name(self, tmp_path):
        """Hand out one shared QueryFile per query name."""

        (tmp_path / "shared.sql").write_text("SELECT 1;", encoding="utf-8")

        loader = QueryLoader(tmp_path)
        assert loader["shared"] is loader["shared"]

    def test_caching_returns_same_content(self, tmp_path):
        """Return cached content on second access even if file changes."""

        sql_file = tmp_path / "cached.sql"
        sql_file.write_text("SELECT 1;", encoding="utf-8")

        loader = QueryLoader(tmp_path)
        first = loader["cached"].query

        # Modify the file on disk
        sql_file.write_text("SELECT 2;", encoding="utf-8")
        loader["cached"].prepare()
        second = loader["cached"].query

        assert first == second == "SELECT 1;"

    def test_missing_file_reports_error(self, tmp_path):
        """Report a QueryFileError for a nonexistent query file."""

        loader = QueryLoader(tmp_path)
        qf = loader["nonexistent"]
        assert qf.query is None
        assert isinstance(qf.error, QueryFileError)
        assert qf.file.endswith("nonexistent.sql")

    def test_options_passed_to_files(self, tmp_path):
        """Build every QueryFile with the loader's options."""

        (tmp_path / "opts.sql").write_text("SELECT  1 -- one\n;", encoding="utf-8")

        loader = QueryLoader(tmp_path, QueryFileOptions(minify=True))
        assert loader["opts"].options.minify is True
        assert loader["opts"].query == "SELECT 1"

    def test_str_path_conversion(self, tmp_path):
        """Accept a string path and convert it to a Path internally."""

        sql_file = tmp_path / "strtest.sql"
        sql_file.write_text("SELECT 'str';", encoding="utf-8")

        loader = QueryLoader(str(tmp_path))
        assert loader["strtest"].query == "SELECT 'str';"
        assert isinstance(loader.path, Path)

    def test_empty_cache_on_init(self, tmp_path):
        """Start with an empty cache on initialization."""

        loader = QueryLoader(tmp_path)
        assert loader.cache == {}
