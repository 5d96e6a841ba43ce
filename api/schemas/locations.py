from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class GeoLevelCreate(BaseModel):
    name: str
    rank: Optional[float] = None

    model_config = ConfigDict(extra="forbid")


class GeoLevelUpdate(BaseModel):
    """Partial update: omitted fields are left untouched."""

    name: Optional[str] = None
    rank: Optional[float] = None

    model_config = ConfigDict(extra="forbid")


class GeoLevelOut(BaseModel):
    id: str
    name: str
    rank: Optional[float] = None

    model_config = ConfigDict(from_attributes=True)


class LocationCreate(BaseModel):
    geo_level: str
    name: str
    aliases: List[str] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid")


class LocationUpdate(BaseModel):
    name: Optional[str] = None
    geo_level: Optional[str] = None

    model_config = ConfigDict(extra="forbid")


class LocationOut(BaseModel):
    geo_id: str
    geo_level: str
    name: str
    aliases: List[str] = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True)


class NameIn(BaseModel):
    name: str

    model_config = ConfigDict(extra="forbid")


class NameBindingOut(BaseModel):
    id: str
    name: str
    is_primary: bool

    model_config = ConfigDict(from_attributes=True)


class NameMatchOut(BaseModel):
    name: str
    is_primary: bool
    geo_id: str
    geo_level: str

    model_config = ConfigDict(from_attributes=True)


class ParentIn(BaseModel):
    parent_id: str

    model_config = ConfigDict(extra="forbid")


class ChildrenIn(BaseModel):
    child_ids: List[str] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid")


class RelationOut(BaseModel):
    id: str
    parent: LocationOut
    child: LocationOut

    model_config = ConfigDict(from_attributes=True)
