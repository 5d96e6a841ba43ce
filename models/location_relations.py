from __future__ import annotations

from sqlalchemy import CheckConstraint, Column, ForeignKey, String
from sqlalchemy.orm import relationship

from models import Base
from models.mixins import RecordMixin


class LocationRelation(RecordMixin, Base):
    """Directed parent -> child edge between two locations.

    This table only carries the self-reference check. The per-level rule (a
    child has at most one live parent per geo level) spans `locations` as well
    and is enforced by `services.relations` inside the insert transaction.
    """

    __tablename__ = "location_relations"
    __table_args__ = (
        CheckConstraint("parent_id != child_id", name="ck_location_relations_no_self"),
    )

    parent_id = Column(
        String(36),
        ForeignKey("locations.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    child_id = Column(
        String(36),
        ForeignKey("locations.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    parent = relationship("Location", foreign_keys=[parent_id])
    child = relationship("Location", foreign_keys=[child_id])
