# llm_log_api/services/query_translator.py
"""
Query-string -> SQL translation for the log listing endpoint.

Flow:
1) `parse_query_params` validates raw strings into `LogQueryParams`
   (all failures reported together as one ValidationError)
2) `build_query_plan` turns validated params into a `QueryPlan`
3) The store executes `plan.count_statement()` and `plan.select_statement()`

Security notes:
- Filter values are always bound parameters.
- Sort column and direction are looked up in fixed maps; request text is never
  spliced into the query.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Literal, Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import ColumnElement, Select, func, select

from llm_log_api.core.errors import ValidationError
from llm_log_api.db.models import LlmCallLog

# Keeps (page - 1) * limit inside a signed 64-bit OFFSET for any valid limit.
MAX_PAGE = (2**63 - 1) // 100

ORDER_COLUMNS = {
    "timestamp": LlmCallLog.timestamp,
    "status": LlmCallLog.status,
    "id": LlmCallLog.id,
}

_INT_PATTERN = re.compile(r"[+-]?\d+", re.ASCII)


class LogQueryParams(BaseModel):
    """Validated filter/sort/paging request for a page of log entries."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    page: int = Field(default=1, strict=True, ge=1, le=MAX_PAGE, description="1-based page number")
    limit: int = Field(default=20, strict=True, ge=1, le=100, description="Page size")
    status: Optional[Literal["success", "fail"]] = Field(default=None, description="Status filter")
    start_time: Optional[str] = Field(default=None, description="Inclusive lower bound on timestamp")
    end_time: Optional[str] = Field(default=None, description="Inclusive upper bound on timestamp")
    order_by: Literal["timestamp", "status", "id"] = Field(default="timestamp")
    order_direction: Literal["asc", "desc"] = Field(default="desc")

    @field_validator("page", "limit", mode="before")
    @classmethod
    def _parse_whole_number(cls, v):
        # Query strings only; "1.0", " 2 " and "1_0" are not integers here
        if isinstance(v, str):
            if not _INT_PATTERN.fullmatch(v):
                raise ValueError("must be a base-10 integer")
            return int(v)
        return v


@dataclass(frozen=True)
class QueryPlan:
    """Predicates, ordering and paging ready for execution."""

    predicates: Tuple[ColumnElement[bool], ...]
    order_by: Tuple[ColumnElement, ...]
    offset: int
    limit: int

    def select_statement(self) -> Select:
        return (
            select(LlmCallLog)
            .where(*self.predicates)
            .order_by(*self.order_by)
            .offset(self.offset)
            .limit(self.limit)
        )

    def count_statement(self) -> Select:
        # Same filters, no ordering or paging
        return select(func.count()).select_from(LlmCallLog).where(*self.predicates)


def _format_errors(exc: PydanticValidationError) -> str:
    parts = []
    for err in exc.errors():
        field = ".".join(str(p) for p in err.get("loc", ())) or "query"
        parts.append(f"{field}: {err.get('msg', 'invalid value')}")
    return "Invalid parameters: " + "; ".join(parts)


def parse_query_params(raw: Mapping[str, Optional[str]]) -> LogQueryParams:
    """
    Validate raw query-string values.

    Absent keys and empty strings fall back to defaults. Unknown keys are
    ignored.

    Raises:
        ValidationError: one aggregated message covering every bad field.
    """
    values = {k: v for k, v in raw.items() if v is not None and v != ""}
    try:
        return LogQueryParams.model_validate(values)
    except PydanticValidationError as exc:
        raise ValidationError(_format_errors(exc)) from exc


def build_query_plan(params: LogQueryParams) -> QueryPlan:
    predicates = []
    if params.status is not None:
        predicates.append(LlmCallLog.status == params.status)
    if params.start_time is not None:
        predicates.append(LlmCallLog.timestamp >= params.start_time)
    if params.end_time is not None:
        predicates.append(LlmCallLog.timestamp <= params.end_time)

    column = ORDER_COLUMNS[params.order_by]
    primary = column.asc() if params.order_direction == "asc" else column.desc()
    order_by = [primary]
    if params.order_by != "id":
        # Tie-break so equal sort keys page deterministically
        order_by.append(LlmCallLog.id.asc())

    return QueryPlan(
        predicates=tuple(predicates),
        order_by=tuple(order_by),
        offset=(params.page - 1) * params.limit,
        limit=params.limit,
    )


def parse_log_id(raw: str) -> int:
    """Parse a path identifier as a base-10, 64-bit signed integer."""
    if raw is None or not _INT_PATTERN.fullmatch(raw):
        raise ValidationError("Invalid ID format")
    log_id = int(raw)
    if not -(2**63) <= log_id <= 2**63 - 1:
        raise ValidationError("Invalid ID format")
    return log_id
