"""Custom Fields API - Configure the extra attributes collected per visitor"""
import logging
from typing import List
from uuid import UUID
from fastapi import APIRouter, Depends
from sqlalchemy.exc import IntegrityError
from sqlmodel.ext.asyncio.session import AsyncSession
from sqlmodel import select

from api.deps import get_admin_context
from domain.custom_fields import normalize_field_name, sort_descriptors
from domain.errors import DuplicateError, NotFoundError, StoreUnavailableError, ValidationError
from domain.models import CustomFieldConfig
from domain.models.custom_field import (
    FIELD_TYPE_LABELS,
    CustomFieldConfigCreate,
    CustomFieldConfigRead,
    CustomFieldConfigUpdate,
)
from domain.session import AdminContext, require_admin
from infrastructure.database import STORE_ERRORS, get_session

logger = logging.getLogger(__name__)

router = APIRouter()


async def list_custom_fields(session: AsyncSession) -> List[CustomFieldConfig]:
    """All descriptors in display order"""
    try:
        result = await session.execute(select(CustomFieldConfig))
        return sort_descriptors(result.scalars().all())
    except STORE_ERRORS as e:
        logger.error(f"Custom field lookup failed: {e}")
        raise StoreUnavailableError() from e


async def _get_field(session: AsyncSession, field_id: UUID) -> CustomFieldConfig:
    result = await session.execute(select(CustomFieldConfig).where(CustomFieldConfig.id == field_id))
    field = result.scalar_one_or_none()

    if not field:
        raise NotFoundError("Campo no encontrado")

    return field


@router.get("/", response_model=List[CustomFieldConfigRead])
async def get_custom_fields(session: AsyncSession = Depends(get_session)):
    """List custom fields in display order (public: the search page needs the labels)"""
    return await list_custom_fields(session)


@router.get("/types")
async def get_field_types():
    """Field types with their display labels, for the configuration form"""
    return [{"value": value, "label": label} for value, label in FIELD_TYPE_LABELS.items()]


@router.post("/", response_model=CustomFieldConfigRead, status_code=201)
async def create_custom_field(
    field: CustomFieldConfigCreate,
    ctx: AdminContext = Depends(get_admin_context),
    session: AsyncSession = Depends(get_session),
):
    """Create a custom field"""
    require_admin(ctx)

    field.field_name = normalize_field_name(field.field_name)
    if not field.field_label or not field.field_label.strip():
        raise ValidationError("La etiqueta del campo es requerida")

    existing = await session.execute(
        select(CustomFieldConfig.id).where(CustomFieldConfig.field_name == field.field_name)
    )
    if existing.first() is not None:
        raise DuplicateError(f"Ya existe un campo '{field.field_name}'")

    db_field = CustomFieldConfig.model_validate(field)
    session.add(db_field)
    try:
        await session.commit()
    except IntegrityError as e:
        await session.rollback()
        raise DuplicateError(f"Ya existe un campo '{field.field_name}'") from e
    await session.refresh(db_field)

    logger.info(f"Custom field {db_field.field_name} created by {ctx.email}")
    return db_field


@router.patch("/{field_id}", response_model=CustomFieldConfigRead)
async def update_custom_field(
    field_id: UUID,
    field_update: CustomFieldConfigUpdate,
    ctx: AdminContext = Depends(get_admin_context),
    session: AsyncSession = Depends(get_session),
):
    """Update label, type, required flag or order (the technical name is fixed)"""
    require_admin(ctx)
    db_field = await _get_field(session, field_id)

    update_data = field_update.model_dump(exclude_unset=True)
    if "field_label" in update_data and not (update_data["field_label"] or "").strip():
        raise ValidationError("La etiqueta del campo es requerida")

    for key, value in update_data.items():
        if value is not None:
            setattr(db_field, key, value)

    session.add(db_field)
    await session.commit()
    await session.refresh(db_field)
    logger.info(f"Custom field {db_field.field_name} updated by {ctx.email}")
    return db_field


@router.delete("/{field_id}", status_code=204)
async def delete_custom_field(
    field_id: UUID,
    ctx: AdminContext = Depends(get_admin_context),
    session: AsyncSession = Depends(get_session),
):
    """Delete a custom field; values already stored on visitors are kept but no longer shown"""
    require_admin(ctx)
    field = await _get_field(session, field_id)

    await session.delete(field)
    await session.commit()
    logger.info(f"Custom field {field.field_name} deleted by {ctx.email}")
    return None
