import logging
import uuid

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.client import get_db
from app.models.user import User
from app.schemas.auth import AuthUser
from app.core.security import TokenManager
from app.core.exceptions import AuthenticationException

logger = logging.getLogger(__name__)

security = HTTPBearer()


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: AsyncSession = Depends(get_db),
) -> AuthUser:
    """
    Dependency to get the current authenticated user.
    Tokens are issued elsewhere; this only verifies them and loads the actor.
    :param credentials: HTTP authorization credentials containing the token.
    :param db: Database session dependency.
    :return: AuthUser object representing the authenticated user.
    """
    try:
        payload = TokenManager.decode_token(credentials.credentials)
    except ValueError as e:
        raise AuthenticationException(str(e))

    if payload.get("type", "access") != "access":
        raise AuthenticationException("Invalid token type")

    user_id = payload.get("user_id") or payload.get("sub")
    try:
        user_uuid = uuid.UUID(str(user_id))
    except ValueError:
        raise AuthenticationException("Invalid token payload")

    user = await db.get(User, user_uuid)
    if not user:
        logger.warning(f"Token presented for unknown user {user_uuid}")
        raise AuthenticationException("User no longer exists")

    return AuthUser.model_validate(user)
