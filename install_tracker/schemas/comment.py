"""Schémas Commentaire / Comment schemas."""

from pydantic import BaseModel, ConfigDict, Field


class CommentCreate(BaseModel):
    text: str = Field(min_length=1)
    author: str | None = None


class CommentRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    task_id: str
    text: str
    author: str | None = None
    created_at: str | None = None
