import asyncio
import logging

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlmodel import Session

from lvlai_api.common.error_handlers import ServiceError
from lvlai_api.database import db
from lvlai_api.models import UserCreate
from lvlai_api.services import UserService

logger = logging.getLogger(__name__)

AUTH_TIMEOUT_SECONDS = 5.0

# Security scheme
security = HTTPBearer()


class AuthUser:
    """Authenticated user information"""

    def __init__(self, user_id: str, email: str, name: str | None = None):
        self.user_id = user_id
        self.email = email
        self.name = name


def display_name_for(email: str, metadata: dict | None = None) -> str:
    """Profile name from Supabase user metadata, falling back to the email local part"""
    metadata = metadata or {}
    for key in ("name", "full_name", "user_name"):
        value = metadata.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()[:100]
    return email.split("@")[0][:100] or "Player"


def placeholder_email(user_id: str) -> str:
    return f"{user_id}@users.invalid"


def ensure_user_exists(user: AuthUser) -> None:
    """
    Ensure the authenticated user has a profile row.
    Profiles carry the level/XP data the organizer reads.
    """
    with Session(db.get_engine()) as session:
        try:
            if UserService.get_user(session, user.user_id):
                logger.debug(f"✅ User already exists in database: {user.user_id}")
                return

            user_data = UserCreate(
                name=user.name or display_name_for(user.email), email=user.email
            )
            UserService.create_user(session, user_data, user.user_id)
            logger.info(f"✅ Created new user in database: {user.user_id} ({user.email})")
        except ServiceError as e:
            # A failed profile insert must not block authentication
            logger.error(f"❌ Failed to ensure user exists: {e.message}")


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> AuthUser:
    """
    Extract and validate user from JWT token
    """
    token = credentials.credentials if credentials else None
    if not token:
        logger.warning("❌ [AUTH] No credentials provided")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="No authentication credentials provided",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        # Verify token with Supabase
        client = db.get_client()
        try:
            user_response = await asyncio.wait_for(
                asyncio.to_thread(client.auth.get_user, token),
                timeout=AUTH_TIMEOUT_SECONDS,
            )
        except TimeoutError as e:
            logger.error("❌ Supabase auth timeout")
            raise HTTPException(
                status_code=status.HTTP_504_GATEWAY_TIMEOUT,
                detail="Authentication service timeout",
                headers={"WWW-Authenticate": "Bearer"},
            ) from e

        if not user_response or not user_response.user:
            logger.warning(f"❌ [AUTH] Invalid token: {token[:20]}... - No user found")
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid authentication token",
                headers={"WWW-Authenticate": "Bearer"},
            )

        supabase_user = user_response.user
        user_id = str(supabase_user.id)
        # users.email is unique, so accounts without one get a per-id address
        email = supabase_user.email or placeholder_email(user_id)
        auth_user = AuthUser(
            user_id=user_id,
            email=email,
            name=display_name_for(
                supabase_user.email or "", supabase_user.user_metadata
            ),
        )
        logger.info(f"✅ User authenticated: {auth_user.user_id}")

        await asyncio.to_thread(ensure_user_exists, auth_user)
        return auth_user

    except HTTPException:
        # Re-raise HTTP exceptions as-is
        raise
    except Exception as e:
        # Log full error details for debugging but return generic message
        logger.error(f"❌ [AUTH] Authentication exception: {type(e).__name__}: {e}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication failed",
            headers={"WWW-Authenticate": "Bearer"},
        ) from e


async def get_current_user_id(
    current_user: AuthUser = Depends(get_current_user),
) -> str:
    """
    Get current user ID from authenticated user
    """
    return current_user.user_id
