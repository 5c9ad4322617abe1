from datetime import datetime
from typing import Optional

from pydantic import Field, field_validator

from datasprint.schemas.users import CamelModel


class PostCreate(CamelModel):
    title: str = Field(min_length=1, max_length=255)
    content: Optional[str] = None
    published: bool = False

    @field_validator("title")
    @classmethod
    def normalize_title(cls, value: str) -> str:
        cleaned = value.strip()
        if not cleaned:
            raise ValueError("Title is required")
        return cleaned

    @field_validator("content")
    @classmethod
    def normalize_content(cls, value: Optional[str]) -> Optional[str]:
        return value.strip() if value is not None else None


class PostUpdate(CamelModel):
    title: Optional[str] = Field(default=None, max_length=255)
    content: Optional[str] = None
    published: Optional[bool] = None

    @field_validator("title")
    @classmethod
    def normalize_title(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        cleaned = value.strip()
        if not cleaned:
            raise ValueError("Title cannot be blank")
        return cleaned

    @field_validator("content")
    @classmethod
    def normalize_content(cls, value: Optional[str]) -> Optional[str]:
        return value.strip() if value is not None else None


class PostResponse(CamelModel):
    id: str
    title: str
    content: Optional[str] = None
    published: bool
    created_at: datetime
    updated_at: datetime


class PostEnvelope(CamelModel):
    post: PostResponse


class PostWriteResponse(CamelModel):
    message: str
    post: PostResponse


class PostListResponse(CamelModel):
    posts: list[PostResponse]
    count: int
