from __future__ import annotations

from sqlalchemy import Boolean, Column, ForeignKey, Index, String, text
from sqlalchemy.orm import relationship

from models import Base
from models.mixins import RecordMixin

_LIVE = text("deleted_at IS NULL")
_LIVE_PRIMARY = text("is_primary AND deleted_at IS NULL")


class LocationName(RecordMixin, Base):
    """Name binding: the primary name or an alias of a location.

    Uniqueness (non-deleted rows only):
    - `(location_id, name)` is unique; the comparison is an exact,
      case-sensitive match.
    - at most one row per `location_id` has `is_primary = true`.
    """

    __tablename__ = "location_names"
    __table_args__ = (
        Index(
            "uq_location_names_location_name_live",
            "location_id",
            "name",
            unique=True,
            sqlite_where=_LIVE,
            postgresql_where=_LIVE,
        ),
        Index(
            "uq_location_names_primary_live",
            "location_id",
            unique=True,
            sqlite_where=_LIVE_PRIMARY,
            postgresql_where=_LIVE_PRIMARY,
        ),
    )

    location_id = Column(
        String(36),
        ForeignKey("locations.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    name = Column(String(255), nullable=False)
    is_primary = Column(Boolean, nullable=False, default=False)

    location = relationship("Location")
