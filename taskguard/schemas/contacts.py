"""Pydantic schemas for the contact directory."""

from __future__ import annotations

from pydantic import BaseModel, Field


class ContactIn(BaseModel):
    name: str = Field(..., min_length=1, max_length=200, description="Unique display name.")
    age: int = Field(..., ge=0, le=150, description="Age in years.")


class ContactOut(BaseModel):
    id: str
    name: str
    age: int
