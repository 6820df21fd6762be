from __future__ import annotations

import pytest
from werkzeug.security import check_password_hash

from smartkid.core.enums import Role, Theme
from smartkid.core.exceptions import AuthenticationError, AuthorizationError, NotFoundError, ValidationError
from smartkid.users.model import Identity

from conftest import PASSWORD


def _registration(**overrides):
    data = {
        "firstName": "Emma",
        "lastName": "Stone",
        "email": "Emma@Example.com",
        "password": "secret1",
        "role": "parent",
    }
    data.update(overrides)
    return data


def test_login_with_valid_credentials_updates_last_active(school):
    result = school.container.auth_service.authenticate("TEACHER_A@smartkid.test", PASSWORD)

    assert result.user.id == school.people["teacher_a"].id
    assert result.user.last_active is not None
    assert school.container.token_service.verify_token(result.token).role == Role.TEACHER


@pytest.mark.parametrize("email,password", [("teacher_a@smartkid.test", "wrong"), ("nobody@smartkid.test", PASSWORD)])
def test_login_failures_share_one_message(school, email, password):
    with pytest.raises(AuthenticationError, match="Invalid email or password"):
        school.container.auth_service.authenticate(email, password)


def test_register_normalizes_email_and_hashes_password(school):
    result = school.container.auth_service.register(_registration())

    assert result.user.email == "emma@example.com"
    assert result.user.password_hash != "secret1"
    assert check_password_hash(result.user.password_hash, "secret1")
    assert result.user.profile_image.startswith("https://ui-avatars.com/")


def test_duplicate_registration_fails_without_creating_a_user(school):
    before = len(school.users.list_all())
    with pytest.raises(ValidationError) as exc:
        school.container.auth_service.register(_registration(email="parent_p@smartkid.test"))

    assert exc.value.errors == {"email": "Email already registered"}
    assert len(school.users.list_all()) == before


@pytest.mark.parametrize(
    "overrides,field",
    [
        ({"role": "admin"}, "role"),
        ({"role": "superuser"}, "role"),
        ({"password": "123"}, "password"),
        ({"email": "not-an-email"}, "email"),
        ({"firstName": "  "}, "firstName"),
    ],
)
def test_register_validation(school, overrides, field):
    with pytest.raises(ValidationError) as exc:
        school.container.auth_service.register(_registration(**overrides))
    assert field in exc.value.errors


def test_update_own_profile_and_theme(school):
    me = school.identity("parent_p")
    user = school.container.user_service.update_profile(me, me.id, {"firstName": "Johnny", "theme": "dark"})
    assert user.first_name == "Johnny"
    assert user.theme == Theme.DARK


def test_profile_of_someone_else_needs_admin(school):
    target = school.people["parent_q"].id
    with pytest.raises(AuthorizationError):
        school.container.user_service.update_profile(school.identity("parent_p"), target, {"firstName": "X"})

    user = school.container.user_service.update_profile(school.identity("admin"), target, {"firstName": "X"})
    assert user.first_name == "X"


def test_profile_email_must_stay_unique(school):
    me = school.identity("parent_p")
    with pytest.raises(ValidationError):
        school.container.user_service.update_profile(me, me.id, {"email": "parent_q@smartkid.test"})


def test_change_password_requires_current_password(school):
    service = school.container.user_service
    me = school.identity("parent_p")

    with pytest.raises(ValidationError):
        service.change_password(me, me.id, "wrong", "newpass1")
    with pytest.raises(ValidationError):
        service.change_password(me, me.id, PASSWORD, "short")

    service.change_password(me, me.id, PASSWORD, "newpass1")
    assert school.container.auth_service.authenticate("parent_p@smartkid.test", "newpass1").user.id == me.id


def test_nobody_changes_another_users_password(school):
    with pytest.raises(AuthorizationError):
        school.container.user_service.change_password(
            school.identity("admin"), school.people["parent_p"].id, PASSWORD, "newpass1"
        )


def test_admin_user_management(school):
    service = school.container.user_service
    assert len(service.list_users(school.identity("director"))) == 6
    with pytest.raises(AuthorizationError):
        service.list_users(school.identity("teacher_a"))

    created = service.create_user(school.identity("admin"), _registration(email="ops@smartkid.test", role="admin"))
    assert created.role == Role.ADMIN
    with pytest.raises(AuthorizationError):
        service.create_user(school.identity("director"), _registration(email="x@smartkid.test"))


def test_current_user_for_deleted_account(school):
    ghost = Identity(id=999, role=Role.PARENT, first_name="G", last_name="H", email="g@h.io")
    with pytest.raises(NotFoundError):
        school.container.auth_service.current_user(ghost)
