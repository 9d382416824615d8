from functools import wraps
from typing import Any, Dict, Optional

from flask import g, jsonify, request
from datetime import datetime, timezone
from marshmallow import Schema
from marshmallow import ValidationError as SchemaValidationError

from storefront.core.dependencies import get_service
from storefront.core.exceptions import UnauthorizedError, ValidationError
from storefront.core.security import Identity, TokenVerifier


def success_response(data, message: Optional[str] = None, status: int = 200):
    """Consistent success response envelope."""
    response = {
        "success": True,
        "data": data,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
    if message:
        response["message"] = message
    return jsonify(response), status


def parse_int(
    v,
    default=None,
    min_val: Optional[int] = None,
    field_name: str = "value",
) -> Optional[int]:
    """
    Parse an optional integer query parameter

    Unparseable input falls back to ``default`` when one is given.
    """
    if v is None or v == "":
        return default
    try:
        result = int(v)
    except (TypeError, ValueError):
        if default is not None:
            return default
        raise ValidationError(f"Invalid {field_name}: must be a valid integer")
    if min_val is not None and result < min_val:
        raise ValidationError(f"{field_name} must be at least {min_val}")
    return result


def load_body(schema: Schema, partial: bool = False) -> Dict[str, Any]:
    """Validate the JSON request body against a marshmallow schema."""
    if not request.is_json:
        raise ValidationError("Content-Type must be application/json.")

    payload = request.get_json(silent=True)
    if payload is None:
        raise ValidationError("Request body must be valid JSON.")

    try:
        return schema.load(payload, partial=partial)
    except SchemaValidationError as err:
        raise ValidationError("Validation failed", field_errors=err.messages)


def current_identity() -> Identity:
    """Identity resolved for this request by ``login_required``."""
    identity = g.get("identity")
    if identity is None:
        raise UnauthorizedError("Not authorized, no token")
    return identity


def login_required(view):
    """Resolve the bearer credential before running the view."""
    @wraps(view)
    def wrapper(*args, **kwargs):
        verifier = get_service(TokenVerifier)
        g.identity = verifier.identity_from_header(request.headers.get("Authorization", ""))
        return view(*args, **kwargs)
    return wrapper


def admin_required(view):
    """Like ``login_required`` but the caller must also hold the admin role."""
    @wraps(view)
    def wrapper(*args, **kwargs):
        verifier = get_service(TokenVerifier)
        identity = verifier.identity_from_header(request.headers.get("Authorization", ""))
        if not identity.is_admin:
            raise UnauthorizedError("Not authorized as an admin")
        g.identity = identity
        return view(*args, **kwargs)
    return wrapper
