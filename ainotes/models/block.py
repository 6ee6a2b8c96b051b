"""Block model

Un block est une unité de contenu typée. Chaque type a sa propre classe
(union discriminée sur `type`), avec seulement les métadonnées qui le concernent.
Les blocks sont immuables : une modification crée une nouvelle instance (voir NotesStore).
"""

import time
import uuid
from datetime import datetime, timezone
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, model_validator

BlockType = Literal["text", "heading", "list", "code", "image"]

_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _to_base36(n: int) -> str:
    if n == 0:
        return "0"
    digits = []
    while n:
        n, r = divmod(n, 36)
        digits.append(_BASE36[r])
    return "".join(reversed(digits))


def new_block_id() -> str:
    """Id opaque : timestamp ms en base36 + suffixe aléatoire"""
    return _to_base36(time.time_ns() // 1_000_000) + uuid.uuid4().hex[:11]


# Métadonnées par type

class HeadingMetadata(BaseModel):
    model_config = ConfigDict(frozen=True)

    level: Optional[int] = Field(default=None, ge=1)


class CodeMetadata(BaseModel):
    model_config = ConfigDict(frozen=True)

    language: Optional[str] = None


class ImageMetadata(BaseModel):
    model_config = ConfigDict(frozen=True)

    alt: Optional[str] = None
    url: Optional[str] = None


class BaseBlock(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    content: str
    created_at: datetime
    updated_at: datetime

    @model_validator(mode="before")
    @classmethod
    def _drop_empty_metadata(cls, data: Any) -> Any:
        # metadata=None -> valeurs par défaut du type
        if isinstance(data, dict) and "metadata" in data and data["metadata"] is None:
            data = {k: v for k, v in data.items() if k != "metadata"}
        return data


class TextBlock(BaseBlock):
    type: Literal["text"] = "text"


class ListBlock(BaseBlock):
    type: Literal["list"] = "list"


class HeadingBlock(BaseBlock):
    type: Literal["heading"] = "heading"
    metadata: HeadingMetadata = Field(default_factory=HeadingMetadata)


class CodeBlock(BaseBlock):
    type: Literal["code"] = "code"
    metadata: CodeMetadata = Field(default_factory=CodeMetadata)


class ImageBlock(BaseBlock):
    type: Literal["image"] = "image"
    metadata: ImageMetadata = Field(default_factory=ImageMetadata)


Block = Annotated[
    Union[TextBlock, HeadingBlock, ListBlock, CodeBlock, ImageBlock],
    Field(discriminator="type"),
]

block_adapter = TypeAdapter(Block)


def build_block(data: dict[str, Any], block_id: str, now: datetime) -> Block:
    """Construit un block validé à partir de {type, content, metadata?}"""
    return block_adapter.validate_python({
        **data,
        "id": block_id,
        "created_at": now,
        "updated_at": now,
    })
