"""Auth API - Back-office sign-in/sign-out through Supabase Auth"""
import logging
from typing import Dict, List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlmodel.ext.asyncio.session import AsyncSession

from api.deps import get_admin_context, get_auth_client, get_bearer_token, get_user_role
from domain.session import AdminContext
from infrastructure.database import get_session
from infrastructure.supabase import SupabaseAuthClient

logger = logging.getLogger(__name__)

router = APIRouter()


class LoginRequest(BaseModel):
    email: str
    password: str


class SessionUser(BaseModel):
    id: UUID
    email: str
    role: Optional[str] = None
    navigation: List[Dict[str, str]] = []


class LoginResponse(BaseModel):
    access_token: str
    refresh_token: Optional[str] = None
    expires_in: Optional[int] = None
    token_type: str = "bearer"
    user: SessionUser


def _session_user(ctx: AdminContext) -> SessionUser:
    # Users without a role get no sections
    return SessionUser(
        id=ctx.user_id,
        email=ctx.email,
        role=ctx.role,
        navigation=ctx.navigation() if ctx.role else [],
    )


@router.post("/login", response_model=LoginResponse)
async def login(
    request: LoginRequest,
    auth: SupabaseAuthClient = Depends(get_auth_client),
    session: AsyncSession = Depends(get_session),
):
    """Sign in with email/password and resolve the role once"""
    data = await auth.sign_in_with_password(request.email.strip(), request.password)
    user = data.get("user") or {}
    user_id = UUID(user["id"])
    role = await get_user_role(session, user_id)

    ctx = AdminContext(
        user_id=user_id,
        email=user.get("email") or request.email,
        role=role,
        access_token=data["access_token"],
    )
    logger.info(f"User {ctx.email} signed in (role={role})")

    return LoginResponse(
        access_token=data["access_token"],
        refresh_token=data.get("refresh_token"),
        expires_in=data.get("expires_in"),
        token_type=data.get("token_type") or "bearer",
        user=_session_user(ctx),
    )


@router.post("/logout", status_code=204)
async def logout(
    token: str = Depends(get_bearer_token),
    auth: SupabaseAuthClient = Depends(get_auth_client),
):
    """Invalidate the session at Supabase Auth"""
    await auth.sign_out(token)
    return None


@router.get("/me", response_model=SessionUser)
async def me(ctx: AdminContext = Depends(get_admin_context)):
    return _session_user(ctx)
