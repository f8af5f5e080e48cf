import logging

from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from .database import get_db
from .models import User
from .security_utils import verify_jwt_token

logger = logging.getLogger(__name__)

security = HTTPBearer()


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db),
) -> User:
    """Get current user from the bearer access token"""

    if not credentials:
        raise HTTPException(
            status_code=401,
            detail="Not authenticated. Please provide a valid Bearer token in the Authorization header.",
        )

    payload = verify_jwt_token(credentials.credentials)
    if not payload:
        raise HTTPException(
            status_code=401,
            detail="Invalid or expired token. Please sign in again.",
            headers={"X-Token-Expired": "true"},
        )

    user_id = payload.get("sub")
    if user_id is None:
        logger.error(f"❌ Token missing user ID claim. Available claims: {list(payload.keys())}")
        raise HTTPException(status_code=401, detail="Invalid token claims")

    user = db.query(User).filter(User.id == int(user_id)).first()
    if not user or not user.is_active:
        logger.warning(f"⚠️ Token for unknown or inactive user {user_id}")
        raise HTTPException(status_code=401, detail="Authentication failed")

    logger.debug(f"✅ User authenticated: {user.username}")
    return user


def require_roles(*roles: str):
    """
    Dependency factory restricting a route to the given roles.

    Usage: current_user: User = Depends(require_roles("super_admin"))
    """

    async def _require(user: User = Depends(get_current_user)) -> User:
        if user.role not in roles:
            logger.warning(f"🚫 User {user.username} ({user.role}) denied, requires {roles}")
            raise HTTPException(
                status_code=403,
                detail=f"This action requires one of the roles: {', '.join(roles)}",
            )
        return user

    return _require
