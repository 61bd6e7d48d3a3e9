"""Pydantic response envelopes for API endpoints."""

from typing import Literal

from pydantic import BaseModel

from storygen.models import GenerationResult


class StoryResponse(BaseModel):
    success: Literal[True] = True
    data: GenerationResult


class ErrorResponse(BaseModel):
    success: Literal[False] = False
    error: str
