"""Signed, expiring bearer tokens bound to a username (HS256 JWT)."""

import enum
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import ExpiredSignatureError, JWTError, jwt
from pydantic import ValidationError

from libs.auth.models import AuthUser
from libs.common.config import Settings
from libs.common.errors import AuthError


class TokenStatus(str, enum.Enum):
    OK = "ok"
    EXPIRED = "expired"
    INVALID = "invalid"


class TokenService:
    def __init__(self, secret: str, *, algorithm: str = "HS256", expires_minutes: int = 60):
        if not secret:
            raise ValueError("Token secret must not be empty")
        self.secret = secret
        self.algorithm = algorithm
        self.expires_minutes = expires_minutes

    @classmethod
    def from_settings(cls, settings: Settings) -> "TokenService":
        return cls(
            settings.JWT_SECRET,
            algorithm=settings.JWT_ALGORITHM,
            expires_minutes=settings.JWT_EXPIRE_MINUTES,
        )

    def issue(self, username: str, expires_delta: Optional[timedelta] = None) -> str:
        """Issue a token for ``username`` carrying sub, iat and exp."""
        issued_at = datetime.now(timezone.utc)
        if expires_delta is None:
            expires_delta = timedelta(minutes=self.expires_minutes)
        expires_at = issued_at + expires_delta
        claims = {
            "sub": username,
            "iat": int(issued_at.timestamp()),
            "exp": int(expires_at.timestamp()),
        }
        return jwt.encode(claims, self.secret, algorithm=self.algorithm)

    def _decode(self, token: str) -> AuthUser:
        payload = jwt.decode(token, self.secret, algorithms=[self.algorithm])
        return AuthUser(**payload)

    def validate(self, token: str) -> TokenStatus:
        try:
            self._decode(token)
        except ExpiredSignatureError:
            return TokenStatus.EXPIRED
        except (JWTError, ValidationError):
            return TokenStatus.INVALID
        return TokenStatus.OK

    def verify(self, token: str) -> AuthUser:
        """Decode a token, raising AuthError unless it is valid and unexpired."""
        try:
            return self._decode(token)
        except ExpiredSignatureError:
            raise AuthError("Token expired")
        except (JWTError, ValidationError):
            raise AuthError("Invalid token")
