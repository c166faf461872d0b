"""Configuration for query files."""

# Standard Library
import os

# Third-Party
from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict

DEVELOPMENT = "development"


class QueryFileOptions(BaseModel):
    """Frozen options snapshot for a QueryFile.

    Attributes:
        debug: Re-check the file modification time on every prepare() and
            reload when it changed.
        minify: Strip comments and flatten the SQL into a single line.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    debug: bool = False
    minify: bool = False

    @classmethod
    def from_env(cls, *, minify: bool = False) -> "QueryFileOptions":
        """Build options with debug enabled when APP_ENV is 'development'.

        Reads a .env file first if one is present.
        """

        load_dotenv()
        return cls(debug=os.getenv("APP_ENV") == DEVELOPMENT, minify=minify)

    def merge(self, *, debug: bool | None = None, minify: bool | None = None) -> "QueryFileOptions":
        """Return a copy with the given overrides applied."""

        updates: dict[str, bool] = {}
        if debug is not None:
            updates["debug"] = bool(debug)
        if minify is not None:
            updates["minify"] = bool(minify)
        if not updates:
            return self
        return self.model_copy(update=updates)
