# llm_log_api/api/routes/llm_logs.py
"""
GET /llm-logs        page through recorded model calls
GET /llm-logs/{id}   fetch one call by id

Query parameters are declared as plain optional strings so FastAPI documents
them without binding them; `parse_query_params` does all validation and
reports failures as 400 before any storage access.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query

from llm_log_api.core.errors import NotFoundError
from llm_log_api.db.store import LogStore, get_store
from llm_log_api.schemas.llm_logs import ErrorResponse, LogEntry, LogListResponse
from llm_log_api.services.query_translator import (
    build_query_plan,
    parse_log_id,
    parse_query_params,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/llm-logs", tags=["llm-logs"])

_ERRORS = {
    400: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


@router.get("", response_model=LogListResponse, responses=_ERRORS)
async def list_llm_logs(
    page: Optional[str] = Query(default=None, description="1-based page number (default 1)"),
    limit: Optional[str] = Query(default=None, description="Page size, 1-100 (default 20)"),
    status: Optional[str] = Query(default=None, description="success | fail"),
    start_time: Optional[str] = Query(default=None, description="Inclusive lower timestamp bound"),
    end_time: Optional[str] = Query(default=None, description="Inclusive upper timestamp bound"),
    order_by: Optional[str] = Query(default=None, description="timestamp | status | id (default timestamp)"),
    order_direction: Optional[str] = Query(default=None, description="asc | desc (default desc)"),
    store: LogStore = Depends(get_store),
):
    """
    Retrieve a page of LLM call logs.

    Example:
      /api/v1/llm-logs?status=fail&start_time=2024-01-01T00:00:00Z&limit=50
    """
    params = parse_query_params(
        {
            "page": page,
            "limit": limit,
            "status": status,
            "start_time": start_time,
            "end_time": end_time,
            "order_by": order_by,
            "order_direction": order_direction,
        }
    )
    plan = build_query_plan(params)

    # Total count before pagination
    total = await store.count(plan)
    rows = await store.fetch_page(plan)

    logger.debug(
        "Listed %d of %d llm logs (page=%d, limit=%d)",
        len(rows), total, params.page, params.limit,
    )

    return LogListResponse(
        data=[LogEntry.model_validate(row) for row in rows],
        total=total,
        page=params.page,
        limit=params.limit,
    )


@router.get(
    "/{log_id}",
    response_model=LogEntry,
    responses={**_ERRORS, 404: {"model": ErrorResponse}},
)
async def get_llm_log(log_id: str, store: LogStore = Depends(get_store)):
    """Fetch a single LLM call log by id."""
    row = await store.get(parse_log_id(log_id))
    if row is None:
        raise NotFoundError("Log not found")
    return LogEntry.model_validate(row)
