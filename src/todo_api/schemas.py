from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

TITLE_MAX_LENGTH = 200
DEFAULT_STATUS = "pending"


def _clean(value: str, field: str, max_length: Optional[int] = None) -> str:
    """Strip whitespace and enforce 1..max_length characters."""
    s = value.strip()
    if max_length is None:
        if not s:
            raise ValueError(f"{field} must not be blank")
        return s
    if not (1 <= len(s) <= max_length):
        raise ValueError(f"{field} length must be between 1 and {max_length} characters")
    return s


# PUBLIC_INTERFACE
class TodoCreate(BaseModel):
    """
    Schema for creating a new Todo item. Any client-supplied id is ignored.
    """

    model_config = ConfigDict(
        json_schema_extra={"example": {"title": "Buy milk", "status": "pending"}}
    )

    title: str = Field(..., description="Short title for the todo item")
    status: str = Field(default=DEFAULT_STATUS, description="Free-text status of the todo item")

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        return _clean(v, "title", TITLE_MAX_LENGTH)

    @field_validator("status")
    @classmethod
    def validate_status(cls, v: str) -> str:
        return _clean(v, "status")


# PUBLIC_INTERFACE
class TodoReplace(TodoCreate):
    """
    Schema for replacing a Todo item. Both mutable fields are required.
    """

    model_config = ConfigDict(
        json_schema_extra={"example": {"title": "Buy oat milk", "status": "done"}}
    )

    status: str = Field(..., description="Free-text status of the todo item")


class TodoStatusUpdate(BaseModel):
    """Body of PATCH /todos/{id}/status."""

    status: str = Field(..., description="New status of the todo item")

    @field_validator("status")
    @classmethod
    def validate_status(cls, v: str) -> str:
        return _clean(v, "status")


class TodoTitleUpdate(BaseModel):
    """Body of PATCH /todos/{id}/title."""

    title: str = Field(..., description="New title of the todo item")

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        return _clean(v, "title", TITLE_MAX_LENGTH)


# PUBLIC_INTERFACE
class TodoOut(BaseModel):
    """
    Schema returned by the API for a Todo item.
    """

    model_config = ConfigDict(
        json_schema_extra={"example": {"id": 123, "title": "Buy milk", "status": "pending"}}
    )

    id: int = Field(..., description="Unique identifier of the todo item")
    title: str = Field(..., description="Short title for the todo item")
    status: str = Field(..., description="Free-text status of the todo item")


class TodoStatusOut(BaseModel):
    id: int
    status: str


class TodoTitleOut(BaseModel):
    id: int
    title: str


class DeleteAck(BaseModel):
    response: str = "success"


class ErrorOut(BaseModel):
    """Body of every 4xx/5xx response."""

    error: str
