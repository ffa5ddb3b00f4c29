from __future__ import annotations

import mimetypes
import os
import uuid
from dataclasses import dataclass, field
from enum import Enum

import aiofiles
from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from authoring.helpers import is_video_locator


class MediaKind(str, Enum):
    image = "image"
    video = "video"
    document = "document"


class MediaOrigin(str, Enum):
    staged = "staged"
    persisted = "persisted"


@dataclass
class StagedFile:
    filename: str
    content: bytes
    content_type: str

    @property
    def size(self) -> int:
        return len(self.content)

    @classmethod
    async def from_path(cls, path: str | os.PathLike, content_type: str | None = None) -> "StagedFile":
        async with aiofiles.open(path, "rb") as f:
            content = await f.read()
        guessed, _ = mimetypes.guess_type(str(path))
        return cls(filename=os.path.basename(path), content=content, content_type=content_type or guessed or "application/octet-stream")


class MediaRecord(BaseModel):
    """Media entry as the backend returns it."""
    model_config = ConfigDict(populate_by_name=True)

    id: int
    url: str = Field(validation_alias=AliasChoices("url", "image", "locator", "video"))


@dataclass
class MediaItem:
    locator: str
    kind: MediaKind
    origin: MediaOrigin
    id: int | None = None
    file: StagedFile | None = None
    handle: str = field(default_factory=lambda: uuid.uuid4().hex[:12])

    @classmethod
    def from_record(cls, record: MediaRecord) -> "MediaItem":
        kind = MediaKind.video if is_video_locator(record.url) else MediaKind.image
        return cls(locator=record.url, kind=kind, origin=MediaOrigin.persisted, id=record.id)

    @classmethod
    def staged_file(cls, file: StagedFile, kind: MediaKind = MediaKind.image) -> "MediaItem":
        item = cls(locator="", kind=kind, origin=MediaOrigin.staged, file=file)
        item.locator = f"staged://{item.handle}/{file.filename}"
        return item

    @classmethod
    def staged_link(cls, url: str) -> "MediaItem":
        return cls(locator=url, kind=MediaKind.video, origin=MediaOrigin.staged)

    @property
    def is_persisted(self) -> bool:
        return self.origin is MediaOrigin.persisted

    @property
    def title(self) -> str:
        if self.file is not None: return self.file.filename
        return self.locator
