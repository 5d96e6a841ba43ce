from __future__ import annotations

from flask import Blueprint, jsonify, request

from api.api_v1.common import dump, dump_all, location_service, request_body
from api.schemas.api_responses import ok
from api.schemas.locations import GeoLevelCreate, GeoLevelOut, GeoLevelUpdate

geo_levels_v1_bp = Blueprint("geo_levels_v1", __name__, url_prefix="/geo-levels")


@geo_levels_v1_bp.post("")
def create_geo_level():
    body = request_body(GeoLevelCreate)
    level = location_service().add_geo_level(body.name, body.rank)
    return jsonify(ok(dump(GeoLevelOut, level))), 201


@geo_levels_v1_bp.get("")
def list_geo_levels():
    """List levels, or search them with `?q=` (404 when nothing matches)."""

    q = (request.args.get("q") or "").strip()
    svc = location_service()
    levels = svc.find_geo_levels(q) if q else svc.list_geo_levels()
    return jsonify(ok(dump_all(GeoLevelOut, levels)))


@geo_levels_v1_bp.get("/<name>")
def get_geo_level(name: str):
    return jsonify(ok(dump(GeoLevelOut, location_service().get_geo_level(name))))


@geo_levels_v1_bp.patch("/<name>")
def update_geo_level(name: str):
    body = request_body(GeoLevelUpdate)
    level = location_service().update_geo_level(name, body.name, body.rank)
    return jsonify(ok(dump(GeoLevelOut, level)))


@geo_levels_v1_bp.delete("/<name>")
def delete_geo_level(name: str):
    location_service().delete_geo_level(name)
    return jsonify(ok(None))
