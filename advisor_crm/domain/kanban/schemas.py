"""Kanban domain schemas - boards, columns, cards and tasks"""

from datetime import date, datetime
from typing import Optional

from pydantic import Field, field_validator

from ...schemas import CamelModel

PRIORITY_PATTERN = "^(low|medium|high|urgent)$"
COLOR_PATTERN = "^#[0-9A-Fa-f]{6}$"


class BoardCreate(CamelModel):
    name: str = Field(..., min_length=1)
    description: Optional[str] = None


class BoardUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None


class BoardResponse(CamelModel):
    id: int
    name: str
    description: Optional[str] = None
    user_id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ColumnCreate(CamelModel):
    name: str = Field(..., min_length=1)
    board_id: int
    position: Optional[int] = Field(None, ge=0, description="Omit to append")
    color: str = Field("#0073EA", pattern=COLOR_PATTERN)


class ColumnUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1)
    position: Optional[int] = Field(None, ge=0)
    color: Optional[str] = Field(None, pattern=COLOR_PATTERN)


class ColumnResponse(CamelModel):
    id: int
    name: str
    position: int
    color: Optional[str] = None
    board_id: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


def _clean_tags(tags: Optional[list[str]]) -> Optional[list[str]]:
    if tags is None:
        return tags
    cleaned = []
    for tag in tags:
        tag = tag.strip()
        if tag and tag not in cleaned:
            cleaned.append(tag)
    return cleaned


class CardCreate(CamelModel):
    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    column_id: int
    position: Optional[int] = Field(None, ge=0, description="Omit to append")
    priority: str = Field("medium", pattern=PRIORITY_PATTERN)
    due_date: Optional[date] = None
    tags: list[str] = Field(default_factory=list)
    assigned_to_id: Optional[int] = None
    client_id: Optional[int] = None

    @field_validator("tags")
    @classmethod
    def validate_tags(cls, v):
        return _clean_tags(v)


class CardUpdate(CamelModel):
    title: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    priority: Optional[str] = Field(None, pattern=PRIORITY_PATTERN)
    due_date: Optional[date] = None
    tags: Optional[list[str]] = None
    assigned_to_id: Optional[int] = None
    client_id: Optional[int] = None

    @field_validator("tags")
    @classmethod
    def validate_tags(cls, v):
        return _clean_tags(v)


class CardMove(CamelModel):
    column_id: int
    position: int = Field(..., description="Target index; clamped to the column")


class CardResponse(CamelModel):
    id: int
    title: str
    description: Optional[str] = None
    position: int
    priority: Optional[str] = None
    due_date: Optional[date] = None
    tags: list[str] = Field(default_factory=list)
    column_id: int
    assigned_to_id: Optional[int] = None
    client_id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("tags", mode="before")
    @classmethod
    def default_tags(cls, v):
        return v or []


class TaskCreate(CamelModel):
    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    card_id: int
    completed: bool = False
    position: Optional[int] = Field(None, ge=0)
    assigned_to_id: Optional[int] = None


class TaskUpdate(CamelModel):
    title: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    completed: Optional[bool] = None
    position: Optional[int] = Field(None, ge=0)
    assigned_to_id: Optional[int] = None


class TaskResponse(CamelModel):
    id: int
    title: str
    description: Optional[str] = None
    completed: bool
    position: int
    card_id: int
    assigned_to_id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
