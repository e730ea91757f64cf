"""Identity lookup: opaque user ids resolved to a role from profile records."""

from __future__ import annotations

from .config import USER_ROLES
from .errors import AuthorizationError
from .models import UserContext


class UserDirectory:
    """Profile records keyed by uid, each carrying a ``role`` claim."""

    def __init__(self, profiles: dict[str, dict] | None = None):
        self._profiles: dict[str, dict] = dict(profiles or {})

    def register(self, uid: str, role: str) -> UserContext:
        if role not in USER_ROLES:
            raise ValueError(f"Unknown role: {role!r}")
        self._profiles[uid] = {"role": role}
        return UserContext(uid=uid, role=role)

    def resolve(self, uid: str | None) -> UserContext:
        if not uid:
            raise AuthorizationError("Login required")
        profile = self._profiles.get(uid)
        if not profile or profile.get("role") not in USER_ROLES:
            raise AuthorizationError(f"No profile for user {uid}")
        return UserContext(uid=uid, role=profile["role"])

    def uids(self) -> list[str]:
        return sorted(self._profiles)


def require_user(user: UserContext | None) -> UserContext:
    if user is None:
        raise AuthorizationError("Login required")
    return user


def require_admin(user: UserContext | None) -> UserContext:
    user = require_user(user)
    if not user.is_admin:
        raise AuthorizationError(f"User {user.uid} is not an admin")
    return user
