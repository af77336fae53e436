# command_center/services/auth_service.py
from typing import Any, Dict, Mapping

import bcrypt
import jwt

from command_center.errors import AuthenticationError
from command_center.logger import get_logger

logger = get_logger(__name__)

INVALID_CREDENTIALS = "Invalid email or password. Please use authorized credentials."

# SSO 身份声明中可能携带邮箱的字段，按顺序取第一个
EMAIL_CLAIMS = ("preferred_username", "email", "upn")


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


class AuthService:
    """
    Establishes the acting identity.

    password mode: one configured email + bcrypt hash.
    sso mode: an ID token from the identity provider, verified with PyJWT,
    whose email must belong to the allowed domain.
    """

    def __init__(
        self,
        *,
        login_email: str = "",
        login_password_hash: str = "",
        allowed_domain: str = "macproducts.net",
        jwks_url: str = "",
        client_id: str = "",
    ):
        self.login_email = (login_email or "").strip().lower()
        self.login_password_hash = login_password_hash or ""
        self.allowed_domain = allowed_domain.lstrip("@").lower()
        self.jwks_url = jwks_url
        self.client_id = client_id

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> "AuthService":
        return cls(
            login_email=config.get("LOGIN_EMAIL", ""),
            login_password_hash=config.get("LOGIN_PASSWORD_HASH", ""),
            allowed_domain=config.get("ALLOWED_DOMAIN", "macproducts.net"),
            jwks_url=config.get("SSO_JWKS_URL", ""),
            client_id=config.get("SSO_CLIENT_ID", ""),
        )

    def authenticate_password(self, *, email: str, password: str) -> str:
        '''
        :param email: submitted email, trimmed and lower-cased before comparing
        :param password: submitted password
        :return: the signed-in email
        :raises AuthenticationError: wrong email or password
        '''
        email = (email or "").strip().lower()
        if not self.login_email or not self.login_password_hash:
            logger.error("Password login is not configured (LOGIN_EMAIL / LOGIN_PASSWORD_HASH)")
            raise AuthenticationError(INVALID_CREDENTIALS)

        if email != self.login_email:
            logger.warning(f"Rejected login for {email}")
            raise AuthenticationError(INVALID_CREDENTIALS)

        try:
            matched = bcrypt.checkpw(
                (password or "").encode("utf-8"),
                self.login_password_hash.encode("utf-8"),
            )
        except ValueError as e:
            logger.error(f"Configured password hash is invalid: {e}")
            raise AuthenticationError(INVALID_CREDENTIALS) from e

        if not matched:
            logger.warning(f"Rejected login for {email}")
            raise AuthenticationError(INVALID_CREDENTIALS)
        return email

    def authenticate_claims(self, claims: Mapping[str, Any]) -> str:
        email = ""
        for key in EMAIL_CLAIMS:
            if claims.get(key):
                email = str(claims[key]).strip().lower()
                break
        if not email:
            raise AuthenticationError("No email claim in the identity token")
        if not email.endswith(f"@{self.allowed_domain}"):
            logger.warning(f"Rejected SSO login for {email}")
            raise AuthenticationError(f"Only @{self.allowed_domain} accounts are allowed")
        return email

    def decode_id_token(self, token: str) -> Dict[str, Any]:
        if not self.jwks_url or not self.client_id:
            raise AuthenticationError("SSO is not configured")
        try:
            signing_key = jwt.PyJWKClient(self.jwks_url).get_signing_key_from_jwt(token)
            return jwt.decode(
                token,
                signing_key.key,
                algorithms=["RS256"],
                audience=self.client_id,
            )
        except jwt.PyJWTError as e:
            logger.warning(f"ID token rejected: {e}")
            raise AuthenticationError("Sign-in failed. Please try again.") from e

    def authenticate_token(self, token: str) -> str:
        return self.authenticate_claims(self.decode_id_token(token))
