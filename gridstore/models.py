"""Document schemas for the files and chunks collections."""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer

UPLOAD_DATE_FORMAT = "%Y-%m-%dT%H:%M:%S.%fZ"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ObjectMetadata(BaseModel):
    """
    One record per stored object in ``<namespace>.files``.

    Field names follow the stored document layout (``_id``, ``chunkSize``,
    ``uploadDate``, ``contentType``); Python code uses the snake_case names.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    file_id: str = Field(alias="_id")
    filename: str
    length: int = Field(ge=0)
    chunk_size: int = Field(alias="chunkSize", gt=0)
    upload_date: datetime = Field(alias="uploadDate")
    md5: str
    content_type: Optional[str] = Field(default=None, alias="contentType")

    @field_serializer("upload_date")
    def _serialize_upload_date(self, value: datetime) -> str:
        # Fixed width so that string order is time order inside the store.
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.strftime(UPLOAD_DATE_FORMAT)

    @property
    def num_chunks(self) -> int:
        return -(-self.length // self.chunk_size)

    def to_document(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)

    @classmethod
    def from_document(cls, document: Dict[str, Any]) -> "ObjectMetadata":
        return cls.model_validate(document)


@dataclass(frozen=True)
class Chunk:
    """
    One fixed-size slice of an object's payload in ``<namespace>.chunks``.
    """
    files_id: str
    n: int
    data: bytes

    def to_document(self) -> Dict[str, Any]:
        return {"files_id": self.files_id, "n": self.n, "data": self.data}

    @classmethod
    def from_document(cls, document: Dict[str, Any]) -> "Chunk":
        return cls(
            files_id=document["files_id"],
            n=document["n"],
            data=document["data"],
        )
