"""Telecom lookup response schemas."""

from typing import Any

from pydantic import BaseModel


class OperatorListResponse(BaseModel):
    success: bool = True
    operators: list[dict[str, Any]]


class OperatorDetectResponse(BaseModel):
    success: bool = True
    operator: dict[str, Any]
