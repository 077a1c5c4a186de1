from datetime import datetime, timedelta

import pytest
from fastapi import HTTPException
from fastapi.security import HTTPAuthorizationCredentials
from jose import jwt

from farrier.auth import get_current_user, require_admin
from farrier.config import AUTH_JWT_AUDIENCE, AUTH_JWT_SECRET
from farrier.models import User


def make_token(sub="user-42", **claims):
    payload = {
        "sub": sub,
        "aud": AUTH_JWT_AUDIENCE,
        "exp": datetime.utcnow() + timedelta(minutes=5),
        **claims,
    }
    return jwt.encode(payload, AUTH_JWT_SECRET, algorithm="HS256")


def bearer(token):
    return HTTPAuthorizationCredentials(scheme="Bearer", credentials=token)


@pytest.mark.asyncio
async def test_profile_is_created_on_first_sight(db):
    token = make_token(email="new@example.com", user_metadata={"name": "New Farrier"})

    user = await get_current_user(bearer(token), db)

    assert user.id == "user-42"
    assert user.full_name == "New Farrier"
    assert user.is_admin is False
    assert db.query(User).count() == 1

    again = await get_current_user(bearer(token), db)
    assert again.id == user.id
    assert db.query(User).count() == 1


@pytest.mark.asyncio
async def test_bad_tokens_are_rejected(db):
    with pytest.raises(HTTPException) as exc_info:
        await get_current_user(bearer("not-a-jwt"), db)
    assert exc_info.value.status_code == 401

    wrong_secret = jwt.encode({"sub": "x", "aud": AUTH_JWT_AUDIENCE}, "other-secret", algorithm="HS256")
    with pytest.raises(HTTPException) as exc_info:
        await get_current_user(bearer(wrong_secret), db)
    assert exc_info.value.status_code == 401


@pytest.mark.asyncio
async def test_require_admin(admin, farrier):
    assert await require_admin(admin) is admin
    with pytest.raises(HTTPException) as exc_info:
        await require_admin(farrier)
    assert exc_info.value.status_code == 403
