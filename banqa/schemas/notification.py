"""Notification Pydantic schemas."""

import uuid
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class NotificationCreate(BaseModel):
    user_id: uuid.UUID
    title: str = Field(..., max_length=255)
    body: str
    type: str = Field(default="system", max_length=40)
    metadata: dict[str, Any] | None = None


class NotificationRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    user_id: uuid.UUID
    title: str
    body: str
    type: str
    read: bool
    metadata: dict[str, Any] = Field(default_factory=dict, validation_alias="details")
    created_at: datetime | None = None


class NotificationResponse(BaseModel):
    success: bool = True
    notification: NotificationRead
