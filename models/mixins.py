from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, String


def utcnow() -> datetime:
    """Timezone-aware current time in UTC; used for every audit column."""

    return datetime.now(timezone.utc)


def new_record_id() -> str:
    """Random UUID in its canonical dashed text form."""

    return str(uuid.uuid4())


class RecordMixin:
    """Identifier, audit timestamps and soft-delete marker shared by every table.

    Business-level deletes set `deleted_at`; rows are never physically removed.
    Every read path filters on `deleted_at IS NULL`.
    """

    id = Column(String(36), primary_key=True, default=new_record_id)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
    )
    deleted_at = Column(DateTime(timezone=True), nullable=True, index=True)

    def mark_deleted(self) -> None:
        self.deleted_at = utcnow()
