"""Shared FastAPI dependencies"""
import logging
from typing import Optional
from uuid import UUID

from fastapi import Depends, Header
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from config import Settings, get_settings
from domain.errors import NotAuthenticatedError, StoreUnavailableError
from domain.models import UserRole
from domain.session import AdminContext
from infrastructure.database import STORE_ERRORS, get_session
from infrastructure.supabase import SupabaseAuthClient, SupabaseStorageClient

logger = logging.getLogger(__name__)


def get_auth_client(settings: Settings = Depends(get_settings)) -> SupabaseAuthClient:
    return SupabaseAuthClient(settings)


def get_storage_client(settings: Settings = Depends(get_settings)) -> SupabaseStorageClient:
    return SupabaseStorageClient(settings)


def get_bearer_token(authorization: Optional[str] = Header(None)) -> str:
    """Extract the Supabase access token from the Authorization header"""
    if not authorization:
        raise NotAuthenticatedError()
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise NotAuthenticatedError()
    return token.strip()


async def get_user_role(session: AsyncSession, user_id: UUID) -> Optional[str]:
    try:
        result = await session.execute(select(UserRole).where(UserRole.user_id == user_id))
        user_role = result.scalar_one_or_none()
    except STORE_ERRORS as e:
        logger.error(f"Role lookup failed: {e}")
        raise StoreUnavailableError() from e
    return user_role.role if user_role else None


async def get_admin_context(
    token: str = Depends(get_bearer_token),
    auth: SupabaseAuthClient = Depends(get_auth_client),
    session: AsyncSession = Depends(get_session),
) -> AdminContext:
    """Resolve the bearer token into the caller's identity and role"""
    user = await auth.get_user(token)
    user_id = UUID(user["id"])
    role = await get_user_role(session, user_id)
    return AdminContext(
        user_id=user_id,
        email=user.get("email") or "",
        role=role,
        access_token=token,
    )

