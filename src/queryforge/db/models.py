"""Explicit schema descriptors used for default column lists."""

from typing import Any, List, Type

from pydantic import BaseModel
from sqlalchemy import Table


class FieldSpec(BaseModel):
    """One column of a model, in declaration order."""

    name: str
    type: str = "any"


class ModelSchema(BaseModel):
    """Ordered field list for a model, supplied once instead of reflected per query."""

    name: str
    fields: List[FieldSpec] = []

    def column_names(self) -> List[str]:
        return [f.name for f in self.fields]

    @classmethod
    def from_pydantic(cls, model: Type[BaseModel]) -> "ModelSchema":
        """Describe a pydantic model; field order follows the class definition."""
        fields = []
        for name, info in model.model_fields.items():
            annotation = info.annotation
            type_name = getattr(annotation, "__name__", None) or str(annotation)
            fields.append(FieldSpec(name=info.alias or name, type=type_name))
        return cls(name=model.__name__, fields=fields)

    @classmethod
    def from_table(cls, table: Table) -> "ModelSchema":
        """Describe a SQLAlchemy table; field order follows the column order."""
        return cls(
            name=table.name,
            fields=[FieldSpec(name=column.name, type=str(column.type)) for column in table.columns],
        )


def resolve_schema(model: Any) -> ModelSchema | None:
    """Accept a ModelSchema, a pydantic model class or a Table."""
    if model is None or isinstance(model, ModelSchema):
        return model
    if isinstance(model, Table):
        return ModelSchema.from_table(model)
    if isinstance(model, type) and issubclass(model, BaseModel):
        return ModelSchema.from_pydantic(model)
    raise TypeError(f"Cannot derive a schema from {model!r}")
