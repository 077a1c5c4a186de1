import logging

from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from sqlalchemy.orm import Session

from .config import AUTH_JWT_ALGORITHM, AUTH_JWT_AUDIENCE, AUTH_JWT_SECRET
from .database import get_db
from .models import ROLE_USER, User

logger = logging.getLogger(__name__)

security = HTTPBearer()


def decode_access_token(token: str) -> dict:
    """
    Verify an identity-provider access token and return its claims.
    The hosted auth service signs tokens with the shared project secret.
    """
    try:
        return jwt.decode(
            token,
            AUTH_JWT_SECRET,
            algorithms=[AUTH_JWT_ALGORITHM],
            audience=AUTH_JWT_AUDIENCE,
        )
    except JWTError as e:
        logger.warning(f"⚠️ Token verification failed: {e}")
        raise HTTPException(status_code=401, detail="Invalid or expired token") from e


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db),
) -> User:
    """Resolve the profile for the bearer token, creating it on first sight"""
    if not credentials:
        raise HTTPException(
            status_code=401,
            detail="Not authenticated. Please provide a valid Bearer token in the Authorization header.",
        )

    token = credentials.credentials
    if len(token.split(".")) != 3:
        logger.warning(f"⚠️ Malformed token received, length: {len(token)}")
        raise HTTPException(
            status_code=401, detail="Invalid token format. Expected a valid JWT token."
        )

    claims = decode_access_token(token)
    subject = claims.get("sub")
    if not subject:
        logger.error(f"❌ Token missing subject claim. Available claims: {list(claims.keys())}")
        raise HTTPException(status_code=401, detail="Invalid token claims")

    user = db.query(User).filter(User.id == subject).first()
    if user:
        return user

    email = claims.get("email")
    name = (claims.get("user_metadata") or {}).get("name")

    logger.info(f"🆕 Creating profile for {email or subject}")
    user = User(id=subject, email=email, full_name=name, role=ROLE_USER)
    db.add(user)
    try:
        db.commit()
        db.refresh(user)
    except Exception as e:
        db.rollback()
        logger.error(f"❌ Failed to create profile for {subject}: {e}")
        raise HTTPException(status_code=500, detail="Failed to create user profile") from e

    return user


async def require_admin(user: User = Depends(get_current_user)) -> User:
    """Restrict a route to administrators"""
    if not user.is_admin:
        logger.warning(f"⚠️ User {user.id} attempted an admin-only action")
        raise HTTPException(status_code=403, detail="Administrator access required")
    return user
