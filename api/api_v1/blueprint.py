from flask import Blueprint

from api.api_v1.geo_levels import geo_levels_v1_bp
from api.api_v1.locations import locations_v1_bp


def create_api_v1_blueprint() -> Blueprint:
    """Create the /api/v1 blueprint and register sub-blueprints."""

    v1_bp = Blueprint("api_v1", __name__, url_prefix="/api/v1")
    v1_bp.register_blueprint(geo_levels_v1_bp)
    v1_bp.register_blueprint(locations_v1_bp)
    return v1_bp
