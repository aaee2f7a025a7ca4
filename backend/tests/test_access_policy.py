"""Token resolution and role checks."""
import uuid

import jwt
import pytest

from efiling.config import settings
from efiling.models import Role
from efiling.services.access_policy import AccessPolicy, Actor
from efiling.services.results import ForbiddenError, UnauthenticatedError
from efiling.services.security import (
    create_access_token,
    create_refresh_token,
    decode_access_token,
    decode_refresh_token,
    get_bearer_token,
    hash_password,
    verify_password,
)


async def test_authorize_resolves_actor(store, u1):
    actor = await AccessPolicy().authorize(create_access_token(u1.id), store)

    assert actor == Actor(id=u1.id, role="User", display_name="Adeyemi Test")


@pytest.mark.parametrize("token", [None, "", "not-a-jwt"])
async def test_authorize_rejects_bad_tokens(store, token):
    with pytest.raises(UnauthenticatedError) as exc:
        await AccessPolicy().authorize(token, store)
    assert exc.value.http_status == 401


async def test_authorize_rejects_refresh_token(store, u1):
    with pytest.raises(UnauthenticatedError):
        await AccessPolicy().authorize(create_refresh_token(u1.id), store)


async def test_authorize_rejects_unknown_user(store):
    with pytest.raises(UnauthenticatedError):
        await AccessPolicy().authorize(create_access_token(uuid.uuid4()), store)


async def test_authorize_rejects_deactivated_user(session, store, u1):
    u1.soft_deleted = True
    await session.commit()

    with pytest.raises(UnauthenticatedError):
        await AccessPolicy().authorize(create_access_token(u1.id), store)


def test_default_movement_roles():
    policy = AccessPolicy()
    for role in (Role.SUPER_ADMIN, Role.ADMIN, Role.PERMANENT_SECRETARY, Role.REGISTRY_OFFICER):
        policy.require_movement(Actor(uuid.uuid4(), role.value, "x"))
    with pytest.raises(ForbiddenError):
        policy.require_movement(Actor(uuid.uuid4(), Role.USER.value, "x"))


def test_admin_roles_exclude_officers():
    policy = AccessPolicy()
    with pytest.raises(ForbiddenError) as exc:
        policy.require_admin(Actor(uuid.uuid4(), Role.REGISTRY_OFFICER.value, "x"))
    assert exc.value.message == "Access denied. Only for Admin, Super Admin!"


def test_roles_are_configurable():
    policy = AccessPolicy(movement_roles=["User"], admin_roles=[])
    policy.require_movement(Actor(uuid.uuid4(), "User", "x"))
    with pytest.raises(ForbiddenError):
        policy.require_movement(Actor(uuid.uuid4(), "Admin", "x"))


def test_password_hash_round_trip():
    hashed = hash_password("s3cret!")

    assert hashed != "s3cret!"
    assert verify_password("s3cret!", hashed)
    assert not verify_password("wrong", hashed)
    assert not verify_password("s3cret!", "garbage")


def test_token_types_are_not_interchangeable():
    user_id = uuid.uuid4()
    access = create_access_token(user_id)
    refresh = create_refresh_token(user_id)

    assert decode_access_token(access)["sub"] == str(user_id)
    assert decode_refresh_token(refresh)["sub"] == str(user_id)
    assert decode_access_token(refresh) is None
    assert decode_refresh_token(access) is None


def test_expired_token_rejected():
    token = jwt.encode(
        {"sub": str(uuid.uuid4()), "iat": 0, "exp": 1, "type": "access"},
        settings.JWT_SECRET,
        algorithm=settings.JWT_ALGORITHM,
    )

    assert decode_access_token(token) is None


def test_refresh_tokens_are_unique():
    user_id = uuid.uuid4()

    assert create_refresh_token(user_id) != create_refresh_token(user_id)


@pytest.mark.parametrize("header,expected", [
    ("Bearer abc", "abc"),
    ("bearer abc", "abc"),
    ("Token abc", None),
    ("Bearer", None),
    (None, None),
])
def test_get_bearer_token(header, expected):
    assert get_bearer_token(header) == expected
