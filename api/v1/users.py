"""Users API - Back-office user management (super_admin only)

Credentials live in Supabase Auth; this service keeps the profile and the
role assignment next to the visitor data.
"""
import asyncio
import logging
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy import delete
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from api.deps import get_admin_context, get_auth_client
from domain.errors import NotFoundError, StoreUnavailableError, ValidationError
from domain.models import UserProfile, UserRole
from domain.models.user import UserCreate, UserRead
from domain.session import AdminContext, require_super_admin
from infrastructure.database import STORE_ERRORS, get_session
from infrastructure.supabase import SupabaseAuthClient

logger = logging.getLogger(__name__)

router = APIRouter()

MIN_PASSWORD_LENGTH = 6


async def _email_for(auth: SupabaseAuthClient, user_id: UUID) -> str:
    try:
        user = await auth.admin_get_user(str(user_id))
    except NotFoundError:
        return ""
    return user.get("email") or ""


@router.get("/", response_model=List[UserRead])
async def list_users(
    ctx: AdminContext = Depends(get_admin_context),
    session: AsyncSession = Depends(get_session),
    auth: SupabaseAuthClient = Depends(get_auth_client),
):
    """List back-office users with their role and email"""
    require_super_admin(ctx)

    profiles = (await session.execute(select(UserProfile).order_by(UserProfile.created_at))).scalars().all()
    roles = (await session.execute(select(UserRole))).scalars().all()
    role_by_user = {r.user_id: r.role for r in roles}

    emails = await asyncio.gather(*[_email_for(auth, p.id) for p in profiles])

    return [
        UserRead(
            id=profile.id,
            email=email,
            full_name=profile.full_name or "",
            role=role_by_user.get(profile.id),
            created_at=profile.created_at,
        )
        for profile, email in zip(profiles, emails)
    ]


@router.post("/", response_model=UserRead, status_code=201)
async def create_user(
    request: UserCreate,
    ctx: AdminContext = Depends(get_admin_context),
    session: AsyncSession = Depends(get_session),
    auth: SupabaseAuthClient = Depends(get_auth_client),
):
    """Create an auth user, its profile and its role"""
    require_super_admin(ctx)

    email = request.email.strip()
    if not email or "@" not in email:
        raise ValidationError("Email inválido")
    if len(request.password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"La contraseña debe tener al menos {MIN_PASSWORD_LENGTH} caracteres")
    if not request.full_name.strip():
        raise ValidationError("El nombre es requerido")

    auth_user = await auth.admin_create_user(email, request.password, request.full_name.strip())
    user_id = UUID(auth_user["id"])

    profile = UserProfile(id=user_id, full_name=request.full_name.strip())
    role = UserRole(user_id=user_id, role=request.role)
    session.add(profile)
    session.add(role)
    try:
        await session.commit()
    except STORE_ERRORS as e:
        await session.rollback()
        logger.error(f"User {email} created in auth but role assignment failed: {e}")
        raise StoreUnavailableError("Usuario creado pero error al asignar rol") from e
    await session.refresh(profile)

    logger.info(f"User {email} ({request.role}) created by {ctx.email}")
    return UserRead(
        id=user_id,
        email=auth_user.get("email") or email,
        full_name=profile.full_name or "",
        role=request.role,
        created_at=profile.created_at,
    )


@router.delete("/{user_id}", status_code=204)
async def delete_user(
    user_id: UUID,
    ctx: AdminContext = Depends(get_admin_context),
    session: AsyncSession = Depends(get_session),
    auth: SupabaseAuthClient = Depends(get_auth_client),
):
    """Delete a user from auth and drop its profile and role"""
    require_super_admin(ctx)

    await auth.admin_delete_user(str(user_id))
    await session.execute(delete(UserRole).where(UserRole.user_id == user_id))
    await session.execute(delete(UserProfile).where(UserProfile.id == user_id))
    await session.commit()

    logger.info(f"User {user_id} deleted by {ctx.email}")
    return None
