"""Visitors API - Back-office visitor management"""
import logging
import time
from typing import List, Optional
from uuid import UUID
from fastapi import APIRouter, Depends, File, UploadFile
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlmodel.ext.asyncio.session import AsyncSession
from sqlmodel import select

from api.deps import get_admin_context, get_storage_client
from api.v1.custom_fields import list_custom_fields
from domain.custom_fields import validate_additional_data
from domain.errors import DuplicateError, NotFoundError, StoreUnavailableError, ValidationError
from domain.models import Visitor
from domain.models.columns import utc_now
from domain.models.visitor import VisitorCreate, VisitorRead, VisitorUpdate, clean_id_number
from domain.session import AdminContext, require_admin
from infrastructure.database import STORE_ERRORS, get_session
from infrastructure.supabase import SupabaseStorageClient

logger = logging.getLogger(__name__)

router = APIRouter()

DUPLICATE_MESSAGE = "Ya existe un visitante con esa cédula"


async def _get_visitor(session: AsyncSession, visitor_id: UUID) -> Visitor:
    query = select(Visitor).where(Visitor.id == visitor_id)
    result = await session.execute(query)
    visitor = result.scalar_one_or_none()

    if not visitor:
        raise NotFoundError("Visitante no encontrado")

    return visitor


async def _ensure_unique_id_number(
    session: AsyncSession,
    id_number: str,
    exclude_id: Optional[UUID] = None,
) -> None:
    query = select(Visitor.id).where(Visitor.id_number == id_number)
    if exclude_id:
        query = query.where(Visitor.id != exclude_id)
    result = await session.execute(query)
    if result.first() is not None:
        raise DuplicateError(DUPLICATE_MESSAGE)


async def _save(session: AsyncSession, visitor: Visitor) -> Visitor:
    session.add(visitor)
    try:
        await session.commit()
    except IntegrityError as e:
        # Lost a race on the unique cedula index
        await session.rollback()
        raise DuplicateError(DUPLICATE_MESSAGE) from e
    except STORE_ERRORS as e:
        await session.rollback()
        logger.error(f"Saving visitor failed: {e}")
        raise StoreUnavailableError() from e
    await session.refresh(visitor)
    return visitor


@router.get("/", response_model=List[VisitorRead])
async def list_visitors(
    ctx: AdminContext = Depends(get_admin_context),
    session: AsyncSession = Depends(get_session),
    skip: int = 0,
    limit: int = 100,
    q: Optional[str] = None,
    authorized: Optional[bool] = None,
):
    """List visitors, newest first; ``q`` matches cedula, name or company"""
    require_admin(ctx)
    query = select(Visitor)

    if q and q.strip():
        term = f"%{q.strip()}%"
        query = query.where(
            or_(
                Visitor.id_number.ilike(term),
                Visitor.full_name.ilike(term),
                Visitor.company.ilike(term),
            )
        )

    if authorized is not None:
        query = query.where(Visitor.authorized == authorized)

    query = query.order_by(Visitor.created_at.desc()).offset(skip).limit(limit)
    result = await session.execute(query)
    return result.scalars().all()


@router.post("/", response_model=VisitorRead, status_code=201)
async def create_visitor(
    visitor: VisitorCreate,
    ctx: AdminContext = Depends(get_admin_context),
    session: AsyncSession = Depends(get_session),
):
    """Create a new visitor"""
    require_admin(ctx)

    visitor.id_number = clean_id_number(visitor.id_number)
    if not visitor.full_name or not visitor.full_name.strip():
        raise ValidationError("El nombre es requerido")
    await _ensure_unique_id_number(session, visitor.id_number)

    descriptors = await list_custom_fields(session)
    visitor.additional_data = validate_additional_data(visitor.additional_data, descriptors)

    db_visitor = Visitor.model_validate(visitor)
    db_visitor = await _save(session, db_visitor)
    logger.info(f"Visitor {db_visitor.id_number} created by {ctx.email}")
    return db_visitor


@router.get("/{visitor_id}", response_model=VisitorRead)
async def get_visitor(
    visitor_id: UUID,
    ctx: AdminContext = Depends(get_admin_context),
    session: AsyncSession = Depends(get_session),
):
    """Get a specific visitor by ID"""
    require_admin(ctx)
    return await _get_visitor(session, visitor_id)


@router.patch("/{visitor_id}", response_model=VisitorRead)
async def update_visitor(
    visitor_id: UUID,
    visitor_update: VisitorUpdate,
    ctx: AdminContext = Depends(get_admin_context),
    session: AsyncSession = Depends(get_session),
):
    """Update a visitor (last_entry_at is only changed by entry registration)"""
    require_admin(ctx)
    db_visitor = await _get_visitor(session, visitor_id)

    update_data = visitor_update.model_dump(exclude_unset=True)

    if "id_number" in update_data:
        update_data["id_number"] = clean_id_number(update_data["id_number"])
        await _ensure_unique_id_number(session, update_data["id_number"], exclude_id=visitor_id)

    if "full_name" in update_data and not (update_data["full_name"] or "").strip():
        raise ValidationError("El nombre es requerido")

    for key in ("authorization_expiry", "authorized"):
        if key in update_data and update_data[key] is None:
            raise ValidationError(f"{key} no puede ser nulo")

    if "additional_data" in update_data:
        descriptors = await list_custom_fields(session)
        update_data["additional_data"] = validate_additional_data(update_data["additional_data"], descriptors)

    for key, value in update_data.items():
        setattr(db_visitor, key, value)

    db_visitor.updated_at = utc_now()
    db_visitor = await _save(session, db_visitor)
    logger.info(f"Visitor {db_visitor.id_number} updated by {ctx.email}")
    return db_visitor


@router.delete("/{visitor_id}", status_code=204)
async def delete_visitor(
    visitor_id: UUID,
    ctx: AdminContext = Depends(get_admin_context),
    session: AsyncSession = Depends(get_session),
):
    """Delete a visitor"""
    require_admin(ctx)
    visitor = await _get_visitor(session, visitor_id)

    await session.delete(visitor)
    await session.commit()
    logger.info(f"Visitor {visitor.id_number} deleted by {ctx.email}")
    return None


@router.post("/{visitor_id}/photo", response_model=VisitorRead)
async def upload_visitor_photo(
    visitor_id: UUID,
    photo: UploadFile = File(...),
    ctx: AdminContext = Depends(get_admin_context),
    session: AsyncSession = Depends(get_session),
    storage: SupabaseStorageClient = Depends(get_storage_client),
):
    """Upload a photograph to Storage and link its public URL to the visitor"""
    require_admin(ctx)
    db_visitor = await _get_visitor(session, visitor_id)

    if not (photo.content_type or "").startswith("image/"):
        raise ValidationError("El archivo debe ser una imagen")

    data = await photo.read()
    if not data:
        raise ValidationError("El archivo está vacío")

    filename = photo.filename or ""
    ext = filename.rsplit(".", 1)[-1].lower() if "." in filename else "jpg"
    path = f"{db_visitor.id_number}-{int(time.time() * 1000)}.{ext}"

    db_visitor.photo_url = await storage.upload(data, path, content_type=photo.content_type)
    db_visitor.updated_at = utc_now()
    return await _save(session, db_visitor)
