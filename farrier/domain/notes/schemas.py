"""Note schemas"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, field_validator


class NoteCreate(BaseModel):
    content: str

    @field_validator("content")
    @classmethod
    def validate_content(cls, v):
        if not v or not v.strip():
            raise ValueError("Note cannot be empty")
        return v


class NoteMentionResponse(BaseModel):
    entity_type: str
    entity_id: str
    display_name: str

    class Config:
        from_attributes = True


class NoteResponse(BaseModel):
    id: int
    user_id: str
    author_name: Optional[str] = None
    content: str
    mentions: list[NoteMentionResponse] = []
    created_at: Optional[datetime] = None


class NoteListResponse(BaseModel):
    items: list[NoteResponse]
    total: int
    page: int
    page_size: int
