"""Helpers shared by the route tests."""

from recordhub.features.users.auth import create_access_token, hash_password
from recordhub.features.users.models import User


PASSWORD = "correct-horse"
# bcrypt is deliberately slow; hash once for every user the tests create
PASSWORD_HASH = hash_password(PASSWORD)


def auth_headers(user: User) -> dict[str, str]:
    """Bearer header for ``user``."""
    return {"Authorization": f"Bearer {create_access_token(user.id)}"}
