"""
Schemas for GET /api/v1/llm-logs and GET /api/v1/llm-logs/{id}.
"""

from __future__ import annotations

from typing import List

from pydantic import BaseModel, ConfigDict, Field


class LogEntry(BaseModel):
    """A single recorded model invocation."""

    model_config = ConfigDict(from_attributes=True)

    id: int = Field(..., description="Primary key assigned by storage")
    timestamp: str = Field(..., description="ISO-8601-like timestamp, as stored")
    status: str = Field(..., description="Call outcome: success | fail")
    input: str = Field(..., description="Prompt sent to the model")
    output: str = Field(..., description="Model response or failure text")


class LogListResponse(BaseModel):
    """
    One page of log entries plus the unpaged match count.

    Example:
    {
      "data": [...],
      "total": 42,
      "page": 1,
      "limit": 20
    }
    """
    data: List[LogEntry] = Field(default_factory=list, description="Entries on this page")
    total: int = Field(..., ge=0, description="Total matching entries before pagination")
    page: int = Field(..., ge=1, description="Requested page (1-based)")
    limit: int = Field(..., ge=1, le=100, description="Requested page size")


class ErrorResponse(BaseModel):
    error: str = Field(..., description="Human-readable error message")
