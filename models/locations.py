from __future__ import annotations

from sqlalchemy import Column, ForeignKey, String
from sqlalchemy.orm import relationship

from models import Base
from models.mixins import RecordMixin


class Location(RecordMixin, Base):
    """Addressable node of the hierarchy, bound to exactly one geo level.

    The display name and aliases are not stored here; they live in
    `location_names` keyed by `location_id`. `id` doubles as the public geo id.
    """

    __tablename__ = "locations"

    geo_level_id = Column(
        String(36),
        ForeignKey("geo_levels.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )

    geo_level = relationship("GeoLevel", back_populates="locations")
