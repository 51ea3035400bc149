# domain/entities/base.py
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class DocumentModel(BaseModel):
    """Base for models stored in MongoDB and exchanged over the API.

    Attributes are snake_case in Python and camelCase on the wire and in storage.
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=True,
        validate_assignment=True,
    )


class Document(DocumentModel):
    """A top-level MongoDB document with an ObjectId exposed as ``id``."""
    id: Optional[str] = Field(None, description="Unique identifier of the document as a string")
    created_at: datetime = Field(default_factory=utc_now, description="Creation time (UTC)")
    updated_at: datetime = Field(default_factory=utc_now, description="Last update time (UTC)")

    @classmethod
    def from_document(cls, document: Dict[str, Any]):
        """Build the entity from a raw MongoDB document."""
        data = dict(document)
        if "_id" in data:
            data["id"] = str(data.pop("_id"))
        return cls.model_validate(data)

    def to_document(self) -> Dict[str, Any]:
        """Dump the entity for storage, leaving ``_id`` to MongoDB."""
        return self.model_dump(by_alias=True, exclude={"id"})


class InputModel(DocumentModel):
    """Request body schema; unknown fields are rejected."""
    model_config = ConfigDict(extra="forbid")
