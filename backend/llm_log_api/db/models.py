# llm_log_api/db/models.py
"""
SQLAlchemy ORM models for the LLM call log API.

The table is written by the upstream bot (and the bootstrap utility); this
service only reads it.

Notes:
- `timestamp` is stored as text (ISO-8601-like), so range filters compare
  strings, not parsed datetimes.
- `status` is restricted by a CHECK constraint; reads do not re-validate it.
"""

from __future__ import annotations

from sqlalchemy import BigInteger, CheckConstraint, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

LOG_STATUSES = ("success", "fail")

# BIGINT on servers; SQLite needs INTEGER PRIMARY KEY for its rowid autoincrement.
LogId = BigInteger().with_variant(Integer, "sqlite")


class Base(DeclarativeBase):
    """Declarative base for all ORM models."""
    pass


class LlmCallLog(Base):
    """One recorded language-model invocation."""

    __tablename__ = "llm_call_logs"
    __table_args__ = (
        CheckConstraint(
            "status IN (" + ", ".join(f"'{s}'" for s in LOG_STATUSES) + ")",
            name="ck_llm_call_logs_status",
        ),
    )

    id: Mapped[int] = mapped_column(LogId, primary_key=True, autoincrement=True)

    timestamp: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[str] = mapped_column(String(16), nullable=False)

    # Prompt and completion bodies (unbounded)
    input: Mapped[str] = mapped_column(Text, nullable=False)
    output: Mapped[str] = mapped_column(Text, nullable=False)
