"""Shared schema pieces.

Learn: Every wire model inherits ApiModel — camelCase on the wire
(`workspaceName`, `isActive`, `createdAt`), snake_case in Python, and
either spelling accepted on input. Unknown input fields are ignored.
"""

import uuid
from typing import Optional

from pydantic import BaseModel, ConfigDict, JsonValue
from pydantic.alias_generators import to_camel

# Dataset schema/metadata, job config, run result: any JSON document,
# stored and returned untouched.
OpaqueJson = JsonValue


class ApiModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class CreatorRead(ApiModel):
    id: uuid.UUID
    name: Optional[str] = None
    email: str


class MessageResponse(ApiModel):
    message: str
