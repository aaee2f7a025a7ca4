"""Base schema classes with camelCase alias generation.

Request bodies derive from CamelModel, responses from RecordResponse (or
TrashableResponse for records that support trash/restore). Python stays
snake_case; API JSON is camelCase.
"""
import uuid
from datetime import datetime
from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Accepts camelCase or snake_case keys, outputs camelCase."""
    model_config = {
        "alias_generator": to_camel,
        "populate_by_name": True,
        "protected_namespaces": (),
    }


class CamelORMModel(CamelModel):
    """Also reads attributes off SQLAlchemy rows."""
    model_config = {**CamelModel.model_config, "from_attributes": True}


class RecordResponse(CamelORMModel):
    id: uuid.UUID
    created_at: datetime
    updated_at: datetime


class TrashableResponse(RecordResponse):
    soft_deleted: bool = False
