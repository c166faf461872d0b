"""SQL query files: load, cache and live-reload SQL text from disk."""

# Standard Library
import logging
from dataclasses import dataclass
from pathlib import Path

# Local
from .config import QueryFileOptions
from .errors import QueryFileError, SQLParseError
from .minify import minify_sql

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _Loaded:
    sql: str
    mtime: int


@dataclass(frozen=True)
class _Failed:
    error: QueryFileError | SQLParseError


class QueryFile:
    """SQL query file provider.

    Reads a file with SQL and prepares it for execution. The file can contain
    both single-line and multi-line comments, but only one SQL query.

    Problems reading the file are never raised from here. They are reported
    through `error` and surface when the query is executed.

    Args:
        file: Name/path of the SQL file.
        options: Frozen options; defaults to QueryFileOptions().
        debug: Override options.debug. In debug mode the file modification
            time is checked on every prepare() and the file is read afresh
            when it changed.
        minify: Override options.minify.
    """

    def __init__(
        self,
        file: str | Path,
        options: QueryFileOptions | None = None,
        *,
        debug: bool | None = None,
        minify: bool | None = None,
    ) -> None:
        self._file = str(file)
        self._options = (options or QueryFileOptions()).merge(debug=debug, minify=minify)
        self._state: _Loaded | _Failed | None = None
        self._ready = False
        self.prepare()

    def _fail(self, error: QueryFileError | SQLParseError) -> None:
        logger.warning("Query file %s failed: %s", self._file, error.message)
        self._state = _Failed(error)
        self._ready = False

    def _file_error(self, exc: OSError | UnicodeDecodeError) -> QueryFileError:
        return QueryFileError(
            getattr(exc, "strerror", None) or str(exc),
            self._file,
            self._options,
            exc,
        )

    def prepare(self) -> None:
        """Prepare the query for execution.

        Reads the file if it has not been read yet, or, in debug mode, if its
        modification time changed since the last read.
        """

        path = Path(self._file)
        mtime: int | None = None

        if self._options.debug and self._ready:
            try:
                mtime = path.stat().st_mtime_ns
            except OSError as exc:
                self._fail(self._file_error(exc))
                return
            if isinstance(self._state, _Loaded) and mtime != self._state.mtime:
                logger.info("Query file %s changed on disk, reloading", self._file)
                self._ready = False

        if self._ready:
            return

        try:
            sql = path.read_text(encoding="utf-8")
            if mtime is None:
                mtime = path.stat().st_mtime_ns
        except (OSError, UnicodeDecodeError) as exc:
            self._fail(self._file_error(exc))
            return

        if self._options.minify:
            try:
                sql = minify_sql(sql, self._file)
            except SQLParseError as exc:
                self._fail(exc)
                return

        logger.debug("Loaded query file %s", self._file)
        self._state = _Loaded(sql, mtime)
        self._ready = True

    @property
    def query(self) -> str | None:
        """Prepared query string, or None when `error` is set."""

        if isinstance(self._state, _Loaded):
            return self._state.sql
        return None

    @property
    def error(self) -> QueryFileError | SQLParseError | None:
        """Error raised while preparing the query, if any."""

        if isinstance(self._state, _Failed):
            return self._state.error
        return None

    @property
    def file(self) -> str:
        return self._file

    @property
    def options(self) -> QueryFileOptions:
        return self._options

    @property
    def ready(self) -> bool:
        return self._ready

    def __str__(self) -> str:
        if self.error is not None:
            return self.error.to_string()
        return self.query or ""

    def __repr__(self) -> str:
        return f"QueryFile({self._file!r}, debug={self._options.debug}, minify={self._options.minify})"


class QueryLoader:
    """Hands out QueryFile objects for `.sql` files in a folder tree.

    Supports nested directories using slash notation: QUERIES["entities/create"]
    """

    def __init__(self, path: Path | str, options: QueryFileOptions | None = None) -> None:
        """Initialize the loader with a base path for SQL files."""

        self.path = Path(path)
        self.options = options or QueryFileOptions()
        self.cache: dict[str, QueryFile] = {}

    def __getitem__(self, name: str) -> QueryFile:
        """Return the shared QueryFile for a query name.

        Args:
            name: Query name, optionally with path (e.g., "entities/create").

        Returns:
            QueryFile: The same instance on every call for the same name. A
            missing file is reported through its `error`.
        """

        if name not in self.cache:
            self.cache[name] = QueryFile(self.path / f"{name}.sql", self.options)

        return self.cache[name]
