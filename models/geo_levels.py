from __future__ import annotations

from sqlalchemy import CheckConstraint, Column, Float, Index, String, text
from sqlalchemy.orm import relationship

from models import Base
from models.mixins import RecordMixin

_LIVE = text("deleted_at IS NULL")


class GeoLevel(RecordMixin, Base):
    """Named, optionally ranked category of location (COUNTRY, STATE, ...).

    Rank expresses depth: a lower rank sits higher in the hierarchy. Levels
    without a rank are exempt from ordering checks.

    Uniqueness:
    - `name` is stored upper-cased and is unique among non-deleted rows.
    """

    __tablename__ = "geo_levels"
    __table_args__ = (
        Index(
            "uq_geo_levels_name_live",
            "name",
            unique=True,
            sqlite_where=_LIVE,
            postgresql_where=_LIVE,
        ),
        CheckConstraint("name = upper(name)", name="ck_geo_levels_name_upper"),
    )

    name = Column(String(64), nullable=False)
    rank = Column(Float, nullable=True)

    locations = relationship("Location", back_populates="geo_level")
