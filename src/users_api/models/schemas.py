"""Pydantic shapes for user requests and responses."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class UserInput(BaseModel):
    """Validated fields needed to create a user."""

    username: str
    email: str
    password: str


class UserCreate(BaseModel):
    """Request body for creating a user.

    Fields are optional here so that missing values reach the controller,
    which reports them with its own messages.
    """

    username: Optional[str] = Field(None, description="User username", examples=["jdoe"])
    email: Optional[str] = Field(
        None, description="User email address", examples=["jdoe@example.com"]
    )
    password: Optional[str] = Field(
        None, description="User password", json_schema_extra={"format": "password"}
    )


class UserUpdate(BaseModel):
    """Request body for a partial update; only the keys sent are applied."""

    username: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = Field(None, json_schema_extra={"format": "password"})

    def changes(self) -> dict:
        return self.model_dump(exclude_unset=True)


class UserOutput(BaseModel):
    """User as returned to callers, without the password hash."""

    model_config = ConfigDict(from_attributes=True)

    id: int = Field(..., description="User ID")
    username: str
    email: str
    created_at: datetime = Field(..., description="Creation timestamp")
    updated_at: datetime = Field(..., description="Last update timestamp")


class MessageResponse(BaseModel):
    message: str


class ErrorResponse(BaseModel):
    """Body of every non-2xx response."""

    message: str
    status: int
