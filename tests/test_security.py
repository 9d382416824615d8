import pytest

from storefront.core.config import SecurityConfig
from storefront.core.exceptions import UnauthorizedError
from storefront.core.security import ROLE_ADMIN, Identity, TokenVerifier


@pytest.fixture
def verifier():
    return TokenVerifier(SecurityConfig(secret_key="test-secret"))


class TestTokenVerifier:
    def test_round_trip_keeps_role(self, verifier):
        token = verifier.sign(Identity(user_id=7, role=ROLE_ADMIN))

        identity = verifier.verify(token)

        assert identity == Identity(user_id=7, role=ROLE_ADMIN)
        assert identity.is_admin

    def test_token_from_other_secret_fails(self, verifier):
        foreign = TokenVerifier(SecurityConfig(secret_key="other-secret")).sign(Identity(user_id=7))

        with pytest.raises(UnauthorizedError) as exc_info:
            verifier.verify(foreign)

        assert exc_info.value.message == "Not authorized, token failed"

    def test_expired_token_fails(self):
        verifier = TokenVerifier(SecurityConfig(secret_key="test-secret", token_max_age_seconds=-1))
        token = verifier.sign(Identity(user_id=7))

        with pytest.raises(UnauthorizedError) as exc_info:
            verifier.verify(token)

        assert exc_info.value.message == "Not authorized, token expired"

    @pytest.mark.parametrize("header", ["", "Token abc", "Bearer ", "Bearer"])
    def test_header_without_bearer_token(self, verifier, header):
        with pytest.raises(UnauthorizedError) as exc_info:
            verifier.identity_from_header(header)

        assert exc_info.value.message == "Not authorized, no token"

    def test_header_with_bearer_token(self, verifier):
        token = verifier.sign(Identity(user_id=3))

        identity = verifier.identity_from_header(f"Bearer {token}")

        assert identity.user_id == 3
        assert not identity.is_admin
