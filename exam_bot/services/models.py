"""Domain enumerations and wire models exchanged with the backend."""

from __future__ import annotations

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class AdSlot(str, Enum):
    """The six fixed positions an advertisement can occupy."""

    TOP = "top"
    BOTTOM = "bottom"
    LEFT1 = "left1"
    LEFT2 = "left2"
    RIGHT1 = "right1"
    RIGHT2 = "right2"


class GenerationKind(str, Enum):
    SUMMARY = "summary"
    QUESTIONS = "questions"

    @property
    def endpoint(self) -> str:
        return f"/generate/{self.value}"

    @property
    def heading(self) -> str:
        if self is GenerationKind.SUMMARY:
            return "📝 Summary"
        return "📋 Question Paper"


class AdRecord(BaseModel):
    position: str
    image_url: Optional[str] = None
    link_url: Optional[str] = None


class AdUpdatePayload(BaseModel):
    position: AdSlot
    image_url: str = Field(..., min_length=1)
    link_url: str = Field(..., min_length=1)


class LoginPayload(BaseModel):
    username: str
    password: str


class LoginResponse(BaseModel):
    success: bool
    message: Optional[str] = None


class VisitorStats(BaseModel):
    realtime: int
    daily: int
    weekly: int
    monthly: int


class GenerationPayload(BaseModel):
    images: List[str]


class GenerationResponse(BaseModel):
    result: str


__all__ = [
    "AdRecord",
    "AdSlot",
    "AdUpdatePayload",
    "GenerationKind",
    "GenerationPayload",
    "GenerationResponse",
    "LoginPayload",
    "LoginResponse",
    "VisitorStats",
]
