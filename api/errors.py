from __future__ import annotations

from flask import jsonify
from pydantic import ValidationError

from api.schemas.api_responses import fail
from logging_utils import get_logger
from services.errors import (
    AlreadyExists,
    CannotDeletePrimary,
    DeadlineExceeded,
    DuplicateRelation,
    InvalidHierarchy,
    InvalidIdentifier,
    LevelInUse,
    LevelNotExist,
    LocationError,
    NameRequired,
    NotFound,
    PrimaryNotFound,
    SelfRelation,
)

logger = get_logger(__name__)

# First match wins, so subclasses must come before their bases.
_STATUS_BY_ERROR = (
    (InvalidIdentifier, 400),
    (NameRequired, 400),
    (NotFound, 404),
    (LevelNotExist, 404),
    (PrimaryNotFound, 404),
    (AlreadyExists, 409),
    (DuplicateRelation, 409),
    (CannotDeletePrimary, 409),
    (LevelInUse, 409),
    (InvalidHierarchy, 422),
    (SelfRelation, 422),
    (DeadlineExceeded, 504),
)


def status_for(err: LocationError) -> int:
    for cls, status in _STATUS_BY_ERROR:
        if isinstance(err, cls):
            return status
    return 400


def handle_location_error(err: LocationError):
    status = status_for(err)
    logger.info("API_ERROR status=%s code=%s message=%s", status, err.code, err.message)
    return jsonify(fail(err.message, code=err.code, details=err.details)), status


def handle_validation_error(err: ValidationError):
    details = {"errors": err.errors(include_url=False, include_context=False)}
    return jsonify(fail("invalid request body", code="invalid_request", details=details)), 400
