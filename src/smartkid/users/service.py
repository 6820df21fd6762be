from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Sequence

from werkzeug.security import check_password_hash, generate_password_hash

from ..access.policy import Capability, require_capability
from ..common.datetime_utils import utc_now
from ..common.validators import (
    optional_str,
    require_email,
    require_enum,
    require_min_length,
    require_non_empty,
)
from ..core.constants import AVATAR_URL, MIN_PASSWORD_LENGTH
from ..core.enums import Role, Theme
from ..core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from .model import Identity, User
from .repository import UserRepository
from .tokens import TokenService

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid email or password"

# Admin accounts are only created by other admins.
SELF_REGISTER_ROLES = frozenset({Role.PARENT, Role.TEACHER, Role.DIRECTOR})


@dataclass(frozen=True)
class AuthResult:
    user: User
    token: str


def _create_account(users: UserRepository, data: Mapping[str, Any], *, allowed_roles: Iterable[Role]) -> User:
    first_name = require_non_empty(data.get("firstName"), "firstName")
    last_name = require_non_empty(data.get("lastName"), "lastName")
    email = require_email(data.get("email"))
    password = require_min_length(data.get("password"), "password", MIN_PASSWORD_LENGTH)
    role = require_enum(data.get("role"), Role, "role")
    if role not in set(allowed_roles):
        raise ValidationError(f"role '{role.value}' cannot be assigned here", field="role")

    if users.get_by_email(email):
        raise ValidationError("Email already registered", field="email")

    try:
        return users.create_user(
            first_name=first_name,
            last_name=last_name,
            email=email,
            password_hash=generate_password_hash(password),
            role=role,
            profile_image=optional_str(data.get("profileImage"), "profileImage")
            or AVATAR_URL.format(first=first_name, last=last_name),
        )
    except ConflictError:
        # Lost a race against a concurrent registration of the same email.
        raise ValidationError("Email already registered", field="email")


class AuthService:
    """Use case: authenticate users and issue/verify tokens."""

    def __init__(self, users: UserRepository, tokens: TokenService):
        self._users = users
        self._tokens = tokens
        self._dummy_hash = generate_password_hash("smartkid-timing-equalizer")

    def authenticate(self, email: str, password: str) -> AuthResult:
        if not email or not password:
            raise ValidationError("Email and password are required")

        user = self._users.get_by_email(str(email).strip().lower())

        # Always run one hash check so unknown emails take as long as wrong passwords.
        try:
            ok = check_password_hash(user.password_hash if user else self._dummy_hash, str(password))
        except ValueError:
            # e.g. placeholder or corrupted hashes
            ok = False

        if not user or not ok:
            logger.info("Login failed")
            raise AuthenticationError(INVALID_CREDENTIALS)

        user = self._users.update_user(user.id, {"last_active": utc_now()}) or user
        logger.info("Login succeeded for user %s", user.id)
        return self._issue(user)

    def register(self, data: Mapping[str, Any]) -> AuthResult:
        user = _create_account(self._users, data, allowed_roles=SELF_REGISTER_ROLES)
        logger.info("Registered user %s as %s", user.id, user.role.value)
        return self._issue(user)

    def current_user(self, identity: Identity) -> User:
        user = self._users.get_by_id(identity.id)
        if not user:
            raise NotFoundError("User not found")
        return user

    def _issue(self, user: User) -> AuthResult:
        return AuthResult(user=user, token=self._tokens.issue_token(Identity.from_user(user)))


class UserService:
    """Use case: profile maintenance and admin user management."""

    def __init__(self, users: UserRepository):
        self._users = users

    def _get(self, user_id: int) -> User:
        user = self._users.get_by_id(user_id)
        if not user:
            raise NotFoundError("User not found")
        return user

    def update_profile(self, identity: Identity, user_id: int, data: Mapping[str, Any]) -> User:
        if identity.id != user_id and identity.role != Role.ADMIN:
            raise AuthorizationError("You can only edit your own profile")
        user = self._get(user_id)

        changes: dict[str, Any] = {}
        if "firstName" in data:
            changes["first_name"] = require_non_empty(data["firstName"], "firstName")
        if "lastName" in data:
            changes["last_name"] = require_non_empty(data["lastName"], "lastName")
        if "profileImage" in data:
            changes["profile_image"] = optional_str(data["profileImage"], "profileImage")
        if "theme" in data:
            changes["theme"] = require_enum(data["theme"], Theme, "theme")
        if "email" in data:
            email = require_email(data["email"])
            if email != user.email:
                other = self._users.get_by_email(email)
                if other and other.id != user.id:
                    raise ValidationError("Email already registered", field="email")
                changes["email"] = email

        if not changes:
            return user
        try:
            updated = self._users.update_user(user_id, changes)
        except ConflictError:
            raise ValidationError("Email already registered", field="email")
        if not updated:
            raise NotFoundError("User not found")
        return updated

    def change_password(self, identity: Identity, user_id: int, current_password: str, new_password: str) -> None:
        if identity.id != user_id:
            raise AuthorizationError("You can only change your own password")
        user = self._get(user_id)

        try:
            ok = check_password_hash(user.password_hash, str(current_password or ""))
        except ValueError:
            ok = False
        if not ok:
            raise ValidationError("Current password is incorrect", field="currentPassword")

        new_password = require_min_length(new_password, "newPassword", MIN_PASSWORD_LENGTH)
        self._users.update_user(user_id, {"password_hash": generate_password_hash(new_password)})
        logger.info("Password changed for user %s", user_id)

    def list_users(self, identity: Identity) -> Sequence[User]:
        require_capability(identity, Capability.ADMIN_READ)
        return self._users.list_all()

    def create_user(self, identity: Identity, data: Mapping[str, Any]) -> User:
        require_capability(identity, Capability.ADMIN_WRITE)
        user = _create_account(self._users, data, allowed_roles=Role)
        logger.info("Admin %s created user %s as %s", identity.id, user.id, user.role.value)
        return user
