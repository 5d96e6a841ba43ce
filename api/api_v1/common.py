from __future__ import annotations

from typing import Iterable, Type, TypeVar

from flask import current_app, request
from pydantic import BaseModel

from config import service_timeout_s
from services.location_service import LocationService

M = TypeVar("M", bound=BaseModel)


def location_service() -> LocationService:
    """Service bound to the app's DB session factory and configured deadline."""

    return LocationService(
        timeout_s=service_timeout_s(current_app.config.get("DEFAULT_TIMEOUT_S"))
    )


def request_body(model: Type[M]) -> M:
    """Validate the JSON body against `model` (missing body -> empty object)."""

    return model.model_validate(request.get_json(silent=True) or {})


def dump(model: Type[BaseModel], obj) -> dict:
    return model.model_validate(obj, from_attributes=True).model_dump(mode="json")


def dump_all(model: Type[BaseModel], objs: Iterable) -> list:
    return [dump(model, o) for o in objs]
