"""Shared helpers for building users and identities in tests."""

from placement_portal.core.auth import CurrentUser, create_access_token, hash_password
from placement_portal.models.enums import Role
from placement_portal.models.user import User

TEST_PASSWORD = "password123"


async def make_user(
    session,
    username: str,
    role: Role,
    department: str | None = None,
    skills: list[str] | None = None,
) -> User:
    user = User(
        username=username,
        email=f"{username}@example.edu",
        password_hash=hash_password(TEST_PASSWORD),
        name=username.replace(".", " ").title(),
        role=role.value,
        department=department,
        skills=skills or [],
    )
    session.add(user)
    await session.commit()
    return user


def as_current(user: User) -> CurrentUser:
    """Identity the services receive for an authenticated user."""
    return CurrentUser(
        id=user.id, role=Role(user.role), department=user.department, email=user.email
    )


def auth_headers(user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user)}"}
