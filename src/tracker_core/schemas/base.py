"""
Base Schemas for tracker-core

Every record handed to listeners is an immutable pydantic model.
"""

from pydantic import BaseModel, ConfigDict


class BaseSchema(BaseModel):
    """Base class of every tracker-core record"""

    model_config = ConfigDict(
        frozen=True,
        arbitrary_types_allowed=True,
        protected_namespaces=(),
    )
