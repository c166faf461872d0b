"""Query result mask."""

# Standard Library
from enum import IntFlag


class QueryResult(IntFlag):
    """Binary mask describing the result expected from a query.

    Any combination of flags is supported, except that MULTI cannot be
    combined with any other flag.
    """

    ONE = 1
    """Expecting a single result-set, with a single row in it."""

    MANY = 2
    """Expecting a single result-set, with one or more rows in it."""

    NONE = 4
    """Expecting a single result-set, with no rows in it."""

    ANY = 6
    """MANY | NONE: a single result-set with any number of rows in it."""

    MULTI = 8
    """Expecting multiple result-sets."""

    @classmethod
    def validate(cls, mask: "int | QueryResult") -> "QueryResult":
        """Return mask as a QueryResult or raise if it is not a valid combination."""

        if isinstance(mask, bool) or not isinstance(mask, int):
            raise TypeError(f"Invalid query result mask: {mask!r}")
        if mask <= 0 or mask & ~int(cls.ONE | cls.MANY | cls.NONE | cls.MULTI):
            raise ValueError(f"Invalid query result mask: {mask}")
        if mask & cls.MULTI and mask != cls.MULTI:
            raise ValueError("MULTI cannot be combined with other flags")
        return cls(mask)
