"""Pydantic schemas for the task list."""

from __future__ import annotations

from typing import List

from pydantic import BaseModel, Field


class TaskCreateRequest(BaseModel):
    """Raw task payload; validation happens in the task service."""

    title: str | None = Field(None, description="Required, up to 100 characters.")
    description: str | None = Field(None, description="Optional, up to 1000 characters.")
    due_date: str | None = Field(None, description="Optional ISO-8601 date or datetime.")


class TaskResponse(BaseModel):
    id: str
    title: str = Field(..., description="HTML-escaped title.")
    description: str = Field("", description="HTML-escaped description.")
    due_date: str | None = Field(None, description="ISO-8601 UTC datetime.")
    created_at: str


class TaskValidationErrorResponse(BaseModel):
    ok: bool = False
    errors: List[str] = Field(default_factory=list, description="Human-readable validation messages.")
