from __future__ import annotations

from flask import Blueprint, jsonify, request

from api.api_v1.common import dump, dump_all, location_service, request_body
from api.schemas.api_responses import ok
from api.schemas.locations import (
    ChildrenIn,
    LocationCreate,
    LocationOut,
    LocationUpdate,
    NameBindingOut,
    NameIn,
    NameMatchOut,
    ParentIn,
    RelationOut,
)

locations_v1_bp = Blueprint("locations_v1", __name__, url_prefix="/locations")


def _level_arg() -> str | None:
    return (request.args.get("level") or "").strip() or None


@locations_v1_bp.post("")
def create_location():
    body = request_body(LocationCreate)
    loc = location_service().add_location(body.geo_level, body.name, body.aliases)
    return jsonify(ok(dump(LocationOut, loc))), 201


@locations_v1_bp.get("")
def list_locations():
    """List locations.

    Query params (first one present wins):
    - ids: comma-separated geo ids; 404 if any is unknown
    - q: substring of a primary name or alias
    - level: restrict the plain listing to one geo level
    """

    svc = location_service()
    ids = (request.args.get("ids") or "").strip()
    q = (request.args.get("q") or "").strip()

    if ids:
        locs = svc.get_locations([i for i in ids.split(",") if i.strip()])
    elif q:
        locs = svc.get_locations_by_pattern(q)
    else:
        locs = svc.list_locations(_level_arg())
    return jsonify(ok(dump_all(LocationOut, locs)))


@locations_v1_bp.get("/names")
def search_names():
    q = (request.args.get("q") or "").strip()
    return jsonify(ok(dump_all(NameMatchOut, location_service().search_names(q))))


@locations_v1_bp.get("/<geo_id>")
def get_location(geo_id: str):
    return jsonify(ok(dump(LocationOut, location_service().get_location(geo_id))))


@locations_v1_bp.patch("/<geo_id>")
def update_location(geo_id: str):
    body = request_body(LocationUpdate)
    loc = location_service().update_location(geo_id, body.name, body.geo_level)
    return jsonify(ok(dump(LocationOut, loc)))


@locations_v1_bp.delete("/<geo_id>")
def delete_location(geo_id: str):
    location_service().delete_location(geo_id)
    return jsonify(ok(None))


# --- names ---------------------------------------------------------------


@locations_v1_bp.get("/<geo_id>/names")
def get_names(geo_id: str):
    return jsonify(ok(dump_all(NameBindingOut, location_service().get_names(geo_id))))


@locations_v1_bp.post("/<geo_id>/aliases")
def add_alias(geo_id: str):
    body = request_body(NameIn)
    svc = location_service()
    svc.add_alias(geo_id, body.name)
    return jsonify(ok(dump(LocationOut, svc.get_location(geo_id)))), 201


@locations_v1_bp.delete("/<geo_id>/aliases/<name>")
def remove_alias(geo_id: str, name: str):
    location_service().remove_alias(geo_id, name)
    return jsonify(ok(None))


@locations_v1_bp.patch("/<geo_id>/names/<name>")
def rename_name(geo_id: str, name: str):
    body = request_body(NameIn)
    svc = location_service()
    svc.rename_name(geo_id, name, body.name)
    return jsonify(ok(dump(LocationOut, svc.get_location(geo_id))))


@locations_v1_bp.put("/<geo_id>/primary-name")
def set_primary_name(geo_id: str):
    body = request_body(NameIn)
    svc = location_service()
    svc.set_primary_name(geo_id, body.name)
    return jsonify(ok(dump(LocationOut, svc.get_location(geo_id))))


# --- relations -----------------------------------------------------------


@locations_v1_bp.get("/<geo_id>/parents")
def get_parents(geo_id: str):
    """Direct parents; with `?level=` the single parent at that level."""

    svc = location_service()
    level = _level_arg()
    if level:
        return jsonify(ok(dump(LocationOut, svc.get_parent_at_level(geo_id, level))))
    return jsonify(ok(dump_all(LocationOut, svc.get_all_parents(geo_id))))


@locations_v1_bp.post("/<geo_id>/parents")
def add_parent(geo_id: str):
    body = request_body(ParentIn)
    relation = location_service().add_parent(geo_id, body.parent_id)
    return jsonify(ok(dump(RelationOut, relation))), 201


@locations_v1_bp.delete("/<geo_id>/parents/<parent_id>")
def remove_parent(geo_id: str, parent_id: str):
    location_service().remove_parent(geo_id, parent_id)
    return jsonify(ok(None))


@locations_v1_bp.get("/<geo_id>/children")
def get_children(geo_id: str):
    """Direct children; with `?level=` only those at that level."""

    svc = location_service()
    level = _level_arg()
    if level:
        children = svc.get_children_at_level(geo_id, level)
    else:
        children = svc.get_all_children(geo_id)
    return jsonify(ok(dump_all(LocationOut, children)))


@locations_v1_bp.post("/<geo_id>/children")
def add_children(geo_id: str):
    body = request_body(ChildrenIn)
    created = location_service().add_children(geo_id, body.child_ids)
    return jsonify(ok(dump_all(RelationOut, created))), 201


@locations_v1_bp.delete("/<geo_id>/children")
def remove_children(geo_id: str):
    body = request_body(ChildrenIn)
    removed = location_service().remove_children(geo_id, body.child_ids)
    return jsonify(ok({"removed": removed}))
