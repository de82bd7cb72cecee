"""Turn result cursors into lists of plain dictionaries."""

import datetime
import uuid
from decimal import Decimal
from typing import Any, Dict, List, Optional, Sequence

from queryforge.core.errors import QueryExecutionError
from queryforge.core.logging import color_palette, log
from queryforge.db.connection import ResultCursor

Scalar = None | bool | int | float | str | bytes | datetime.datetime | datetime.date | datetime.time

_PASSTHROUGH = (bool, int, float, str, bytes, datetime.datetime, datetime.date, datetime.time)


def to_scalar(value: Any) -> Scalar:
    """Convert a driver value into one of the supported scalar types."""
    if value is None or isinstance(value, _PASSTHROUGH):
        return value
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, (bytearray, memoryview)):
        return bytes(value)
    if isinstance(value, uuid.UUID):
        return str(value)
    return str(value)


def _columns(cursor: ResultCursor) -> List[str]:
    try:
        return list(cursor.keys())
    except Exception as e:
        raise QueryExecutionError("columns", f"failed to get columns: {e}") from e


def _fetch(cursor: ResultCursor) -> Optional[Sequence[Any]]:
    try:
        return cursor.fetchone()
    except Exception as e:
        raise QueryExecutionError("iteration", f"row iteration error: {e}") from e


def _scan(columns: List[str], row: Sequence[Any]) -> Dict[str, Scalar]:
    try:
        values = list(row)
        if len(values) != len(columns):
            raise ValueError(f"expected {len(columns)} values, got {len(values)}")
        return {column: to_scalar(value) for column, value in zip(columns, values)}
    except Exception as e:
        raise QueryExecutionError("scan", f"failed to scan row: {e}") from e


def close_quietly(cursor: ResultCursor) -> None:
    """Close `cursor`, logging instead of raising if that fails."""
    try:
        cursor.close()
    except Exception as e:
        log.warn(f"Failed to close cursor: {color_palette['dim'](e)}")


def materialize(cursor: ResultCursor) -> List[Dict[str, Scalar]]:
    """Read every remaining row from `cursor`.

    Keys follow the cursor's column order. Any failure discards the rows read
    so far and raises QueryExecutionError.
    """
    columns = _columns(cursor)
    rows: List[Dict[str, Scalar]] = []
    while True:
        row = _fetch(cursor)
        if row is None:
            return rows
        rows.append(_scan(columns, row))


def materialize_first(cursor: ResultCursor) -> Optional[Dict[str, Scalar]]:
    """Read only the first row from `cursor`, or None when it is empty."""
    columns = _columns(cursor)
    row = _fetch(cursor)
    return None if row is None else _scan(columns, row)
