"""
REST API endpoints for the favorite-number service.

Endpoints:
    GET    /api/health         - Health check
    POST   /api/v1/favorite    - Submit a user's favorite number

Every ``/api/v1/favorite`` response has the shape
``{"isOK": bool, "msg"?: str}``; ``msg`` is omitted on success.
"""

import logging

from flask import Blueprint, Response, current_app, jsonify, request

from favorite_service.validation import BindError, FavoriteNumRequest, validate_favorite

logger = logging.getLogger(__name__)

api_bp = Blueprint("api", __name__)

BAD_REQUEST_JSON_SYNTAX = "json not valid"
BAD_REQUEST_NOT_VALID = "request not valid"
INTERNAL_ERROR = "internal server error"


def _ok() -> tuple[Response, int]:
    return jsonify({"isOK": True}), 200


def _error(msg: str, status: int) -> tuple[Response, int]:
    return jsonify({"isOK": False, "msg": msg}), status


def _bind_favorite() -> FavoriteNumRequest:
    """
    Read the request body into a :class:`FavoriteNumRequest`.

    An empty body, or a JSON body of ``null``, binds nothing and leaves
    both fields at their zero values for validation to reject.
    """
    body = request.get_data(cache=True)
    if not body:
        return FavoriteNumRequest()
    if request.is_json and body.strip() == b"null":
        return FavoriteNumRequest()
    return FavoriteNumRequest.from_json(request.get_json(silent=True))


@api_bp.route("/health", methods=["GET"])
def health_check() -> tuple[Response, int]:
    """Health check endpoint for load-test preflight."""
    return jsonify({"status": "healthy", "service": "favorite"}), 200


@api_bp.route("/v1/favorite", methods=["POST"])
def favorite() -> tuple[Response, int]:
    """
    Accept a favorite number for a user.

    Request Body (JSON):
        userId: RFC 4122 UUID string (required)
        favNum: Integer greater than zero (required)

    Returns:
        200 on success, 400 when the body cannot be read or fails
        validation, 500 when the rejection cannot be logged.
    """
    try:
        req = _bind_favorite()
    except BindError as exc:
        logger.warning("Rejected unreadable favorite request: %s", exc)
        return _error(BAD_REQUEST_JSON_SYNTAX, 400)

    errors = validate_favorite(req)
    if not errors:
        return _ok()

    validation_log = current_app.extensions.get("validation_log")
    if validation_log is not None:
        try:
            validation_log.write(errors)
        except OSError:
            logger.exception(
                "Could not log validation errors. User ID: %s, Favorite Number: %s",
                req.user_id,
                req.fav_num,
            )
            return _error(INTERNAL_ERROR, 500)

    logger.warning(
        "Invalid favorite request: %s",
        ", ".join(f"{error.namespace}={error.tag}" for error in errors),
    )
    return _error(BAD_REQUEST_NOT_VALID, 400)
