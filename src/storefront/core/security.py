"""
Access control seam.

Authentication lives outside this service: an upstream identity provider
hands clients a signed bearer credential carrying ``{"user_id", "role"}``.
This module only verifies that credential and exposes the resulting
``Identity`` to request handlers.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict

from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer

from storefront.core.config import SecurityConfig
from storefront.core.exceptions import UnauthorizedError

logger = logging.getLogger(__name__)

ROLE_ADMIN = "admin"
ROLE_CUSTOMER = "customer"


@dataclass(frozen=True)
class Identity:
    """Authenticated caller"""
    user_id: int
    role: str = ROLE_CUSTOMER

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN


class TokenVerifier:
    def __init__(self, config: SecurityConfig):
        self._serializer = URLSafeTimedSerializer(config.secret_key, salt=config.token_salt)
        self._max_age = config.token_max_age_seconds

    def sign(self, identity: Identity) -> str:
        """Produce a credential for ``identity`` (seed data and tests)."""
        return self._serializer.dumps({"user_id": identity.user_id, "role": identity.role})

    def verify(self, token: str) -> Identity:
        try:
            payload: Dict[str, Any] = self._serializer.loads(token, max_age=self._max_age)
        except SignatureExpired:
            raise UnauthorizedError("Not authorized, token expired")
        except BadSignature:
            logger.warning("Rejected bearer credential with bad signature")
            raise UnauthorizedError("Not authorized, token failed")

        user_id = payload.get("user_id")
        if not isinstance(user_id, int) or isinstance(user_id, bool) or user_id <= 0:
            raise UnauthorizedError("Not authorized, token failed")

        return Identity(user_id=user_id, role=str(payload.get("role") or ROLE_CUSTOMER))

    def identity_from_header(self, authorization: str) -> Identity:
        """Resolve an ``Authorization`` header value into an Identity"""
        scheme, _, token = (authorization or "").partition(" ")
        if scheme.lower() != "bearer" or not token.strip():
            raise UnauthorizedError("Not authorized, no token")
        return self.verify(token.strip())
