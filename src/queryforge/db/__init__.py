"""Database interaction components: connection seam, materializer and schemas.

`queryforge.db.client` depends on the query builder and is exported from the
top-level package instead of here.
"""

from queryforge.db.connection import Connection, ResultCursor, SqlAlchemyConnection
from queryforge.db.materialize import materialize, materialize_first, to_scalar
from queryforge.db.models import FieldSpec, ModelSchema

__all__ = [
    "Connection",
    "ResultCursor",
    "SqlAlchemyConnection",
    "materialize",
    "materialize_first",
    "to_scalar",
    "FieldSpec",
    "ModelSchema",
]
