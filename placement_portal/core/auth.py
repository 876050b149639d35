"""Authentication: password hashing, JWT handling and role dependencies."""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from passlib.context import CryptContext

from placement_portal.core.config import settings
from placement_portal.core.exceptions import forbidden_exception, unauthorized_exception
from placement_portal.models.enums import Role
from placement_portal.models.user import User

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class CurrentUser:
    """Identity decoded from a bearer token."""

    id: int
    role: Role
    department: str | None = None
    email: str | None = None


def hash_password(password: str) -> str:
    """Hash a plain-text password."""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash."""
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(user: User, expires_delta: timedelta | None = None) -> str:
    """Create a signed access token carrying the user's id, role and department."""
    expire = datetime.now(UTC) + (
        expires_delta or timedelta(minutes=settings.jwt_expire_minutes)
    )
    claims = {
        "sub": str(user.id),
        "role": user.role,
        "department": user.department,
        "email": user.email,
        "exp": expire,
    }
    return jwt.encode(claims, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> CurrentUser:
    """Decode and verify a token.

    Raises:
        HTTPException: 401 when the token is malformed, expired or incomplete.
    """
    try:
        payload = jwt.decode(
            token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm]
        )
    except JWTError as e:
        logger.warning(f"Rejected bearer token: {e}")
        raise unauthorized_exception("Invalid or expired token")

    try:
        return CurrentUser(
            id=int(payload["sub"]),
            role=Role(payload["role"]),
            department=payload.get("department"),
            email=payload.get("email"),
        )
    except (KeyError, ValueError):
        raise unauthorized_exception("Invalid token claims")


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> CurrentUser:
    """Dependency returning the authenticated caller."""
    if credentials is None or not credentials.credentials:
        raise unauthorized_exception()
    return decode_token(credentials.credentials)


def require_roles(*roles: Role):
    """Build a dependency that only admits the given roles."""
    allowed = frozenset(roles)

    async def dependency(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if user.role not in allowed:
            logger.warning(
                f"User {user.id} with role {user.role.value} denied; "
                f"requires one of {sorted(r.value for r in allowed)}"
            )
            raise forbidden_exception()
        return user

    return dependency
