from flask import Blueprint

from api.api_v1.blueprint import create_api_v1_blueprint


def create_api_blueprint(*, enable_api: bool = True) -> Blueprint:
    """Create the main API blueprint and register sub-blueprints.

    Keep this as the single registration point to avoid double-registering routes.
    """
    api_bp = Blueprint("api", __name__)

    # Versioned API
    if enable_api:
        api_bp.register_blueprint(create_api_v1_blueprint())

    return api_bp
