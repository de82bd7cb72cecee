"""Builder configuration."""

from enum import Enum

from pydantic import BaseModel, ConfigDict


class PlaceholderStyle(str, Enum):
    """How bound parameters are spelled in statement text."""

    QMARK = "qmark"      # ?
    FORMAT = "format"    # %s
    NUMERIC = "numeric"  # :1
    DOLLAR = "dollar"    # $1

    def placeholder(self, position: int) -> str:
        """Render the placeholder for the 1-based `position`."""
        if self is PlaceholderStyle.QMARK:
            return "?"
        if self is PlaceholderStyle.FORMAT:
            return "%s"
        if self is PlaceholderStyle.NUMERIC:
            return f":{position}"
        return f"${position}"

    @classmethod
    def from_paramstyle(cls, paramstyle: str) -> "PlaceholderStyle":
        """Map a DB-API `paramstyle` onto a supported placeholder style.

        Drivers that only speak named styles get ``format`` when they are
        pyformat drivers and ``qmark`` otherwise.
        """
        mapping = {
            "qmark": cls.QMARK,
            "format": cls.FORMAT,
            "pyformat": cls.FORMAT,
            "numeric": cls.NUMERIC,
            "numeric_dollar": cls.DOLLAR,
        }
        return mapping.get(paramstyle, cls.QMARK)


class QueryConfig(BaseModel):
    """Options shared by every builder created with this config."""

    model_config = ConfigDict(frozen=True)

    placeholder_style: PlaceholderStyle = PlaceholderStyle.QMARK
    log_statements: bool = False


DEFAULT_CONFIG = QueryConfig()
