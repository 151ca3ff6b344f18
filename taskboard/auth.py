"""
Password hashing and token issuing
"""
import secrets
from datetime import timedelta

from jose import JWTError, jwt
from passlib.context import CryptContext

from taskboard.config import Settings
from taskboard.domain import clock
from taskboard.errors import UserUnauthenticated

# pbkdf2_sha256 - primary (no native deps)
# bcrypt - verify-only for legacy hashes
pwd_context = CryptContext(schemes=["pbkdf2_sha256", "bcrypt"], deprecated=["bcrypt"])

USER_ID_CLAIM = "user_id"


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    return pwd_context.verify(password, password_hash)


class TokenService:
    """
    Signs access tokens (JWT with a `user_id` claim) and mints opaque refresh tokens
    """

    def __init__(self, settings: Settings):
        self.sign_key = settings.JWT_SIGN_KEY
        self.signing_method = settings.JWT_SIGNING_METHOD
        self.access_ttl = timedelta(seconds=settings.JWT_ACCESS_TTL)
        self.refresh_ttl = timedelta(seconds=settings.JWT_REFRESH_TTL)

    def new_access_token(self, user_id: str) -> str:
        now = clock.utc_now()
        claims = {
            USER_ID_CLAIM: user_id,
            "iat": int(now.timestamp()),
            "exp": int((now + self.access_ttl).timestamp()),
        }
        return jwt.encode(claims, self.sign_key, algorithm=self.signing_method)

    def new_refresh_token(self) -> str:
        return secrets.token_urlsafe(32)

    def get_user_id(self, token: str) -> str:
        """
        Validate an access token and return its user_id claim

        Raises:
            UserUnauthenticated: bad signature, expired, or no user_id claim
        """
        try:
            claims = jwt.decode(token, self.sign_key, algorithms=[self.signing_method])
        except JWTError as exc:
            raise UserUnauthenticated() from exc
        user_id = claims.get(USER_ID_CLAIM)
        if not isinstance(user_id, str) or not user_id:
            raise UserUnauthenticated()
        return user_id
