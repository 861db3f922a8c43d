"""
SQLModel definitions for Drill AI.
Defines the tables backing the well list, per-well drilling data and chat transcripts.
"""

from datetime import datetime, timezone
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Field, SQLModel, Column, JSON
from sqlalchemy import Index


DEFAULT_STATUS = "Planning"
ACTIVE_STATUS = "Active"


def utc_now() -> datetime:
    """Current time as a timezone-aware UTC datetime"""
    return datetime.now(timezone.utc)


class Well(SQLModel, table=True):
    """
    A well shown in the well list.

    Depth and status are derived: they only change as a side effect of a
    successful upload into the well's data.
    """
    __tablename__ = "wells"

    id: Optional[int] = Field(default=None, primary_key=True)

    # Display name, also the key used by the API
    name: str = Field(
        index=True,
        nullable=False,
        unique=True,
        max_length=255
    )

    # Maximum depth across the uploaded records, 0 when there is no data
    depth: float = Field(default=0, nullable=False)

    status: str = Field(
        default=DEFAULT_STATUS,
        max_length=50,
        nullable=False
    )

    created_at: datetime = Field(
        default_factory=utc_now,
        nullable=False
    )


class WellData(SQLModel, table=True):
    """
    The current record set of a well.

    One row per well. A new upload replaces ``records`` wholesale; rows are
    never merged or appended.
    """
    __tablename__ = "well_data"

    id: Optional[int] = Field(default=None, primary_key=True)

    well_name: str = Field(
        index=True,
        nullable=False,
        unique=True,
        max_length=255
    )

    source_filename: str = Field(
        nullable=False,
        max_length=500
    )

    # Canonical records exactly as produced by the parser
    records: list = Field(
        default=[],
        sa_column=Column(JSON, nullable=False)
    )

    headers: list = Field(
        default=[],
        sa_column=Column(JSON, nullable=False)
    )

    ingest_timestamp: datetime = Field(
        default_factory=utc_now,
        nullable=False
    )


class ChatMessage(SQLModel, table=True):
    """
    One message of a well's chat transcript.
    Messages are append-only; ``seq`` keeps the transcript order.
    """
    __tablename__ = "chat_messages"

    seq: Optional[int] = Field(default=None, primary_key=True)

    id: UUID = Field(
        default_factory=uuid4,
        index=True,
        nullable=False,
        unique=True
    )

    well_name: str = Field(
        index=True,
        nullable=False,
        max_length=255
    )

    # 'user' or 'assistant'
    role: str = Field(nullable=False, max_length=20)

    content: str = Field(default="", nullable=False)

    timestamp: datetime = Field(
        default_factory=utc_now,
        nullable=False
    )

    # Optional file attachments: [{"id", "name", "type", "size", "content"?}]
    attachments: Optional[list] = Field(
        default=None,
        sa_column=Column(JSON, nullable=True)
    )


Index('idx_chat_well_seq', ChatMessage.well_name, ChatMessage.seq)
