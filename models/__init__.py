"""ORM models for the location hierarchy.

Tables: geo_levels, locations, location_names, location_relations. All of them
share `RecordMixin` (uuid text id, audit timestamps, soft delete) and the single
declarative `Base` from `db.py`, re-exported here so model modules and tests
import it from one place.
"""

from db import Base  # noqa: F401

# Registering every model on import lets `Base.metadata.create_all()` build a
# fresh database in one call.
from models.geo_levels import GeoLevel  # noqa: F401
from models.locations import Location  # noqa: F401
from models.location_names import LocationName  # noqa: F401
from models.location_relations import LocationRelation  # noqa: F401
