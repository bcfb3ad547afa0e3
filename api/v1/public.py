"""Public API - Visitor lookup by cedula and entry registration

No session required. The lookup is read-only; the only write is the entry
registration, which the store re-checks against the authorization window.
"""
import logging
from datetime import datetime, timezone
from typing import Dict, List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from api.v1.custom_fields import list_custom_fields
from config import Settings, get_settings
from domain.access import (
    DECISION_TITLES,
    EXPIRED_NOTICE,
    NOT_FOUND_NOTICE,
    AccessDecision,
    evaluate,
    is_expired,
)
from domain.custom_fields import render_additional_data
from domain.entry import register_entry
from domain.errors import StoreUnavailableError
from domain.models import Visitor
from domain.models.visitor import VisitorRead, clean_id_number
from infrastructure.database import STORE_ERRORS, get_session

logger = logging.getLogger(__name__)

router = APIRouter()


class VisitorLookupResponse(BaseModel):
    decision: AccessDecision
    title: str
    message: Optional[str] = None
    expired: bool = False
    can_register_entry: bool = False
    visitor: Optional[VisitorRead] = None
    custom_fields: List[Dict[str, str]] = []
    searched_at: datetime


class EntryRegisteredResponse(BaseModel):
    message: str
    visitor: VisitorRead


async def find_visitor_by_id_number(session: AsyncSession, id_number: str) -> Optional[Visitor]:
    try:
        result = await session.execute(select(Visitor).where(Visitor.id_number == id_number))
        return result.scalar_one_or_none()
    except STORE_ERRORS as e:
        logger.error(f"Visitor lookup failed: {e}")
        raise StoreUnavailableError() from e


async def lookup_visitor(
    session: AsyncSession,
    id_number: str,
    settings: Settings,
    now: Optional[datetime] = None,
) -> VisitorLookupResponse:
    """Find a visitor by cedula and decide whether it may enter"""
    id_number = clean_id_number(id_number)
    now = now or datetime.now(timezone.utc)
    tz = settings.local_timezone

    visitor = await find_visitor_by_id_number(session, id_number)
    decision = evaluate(visitor, now, tz)
    logger.info(f"Lookup cedula={id_number} decision={decision.value}")

    if visitor is None:
        return VisitorLookupResponse(
            decision=decision,
            title=DECISION_TITLES[decision],
            message=NOT_FOUND_NOTICE,
            searched_at=now,
        )

    expired = is_expired(visitor.authorization_expiry, now, tz)
    descriptors = await list_custom_fields(session)
    return VisitorLookupResponse(
        decision=decision,
        title=DECISION_TITLES[decision],
        message=EXPIRED_NOTICE if expired else None,
        expired=expired,
        can_register_entry=decision == AccessDecision.AUTHORIZED,
        visitor=VisitorRead.model_validate(visitor),
        custom_fields=render_additional_data(visitor.additional_data, descriptors),
        searched_at=now,
    )


@router.get("/visitors/{id_number}", response_model=VisitorLookupResponse)
async def lookup(
    id_number: str,
    session: AsyncSession = Depends(get_session),
    settings: Settings = Depends(get_settings),
):
    """Check whether the visitor with this cedula is authorized to enter"""
    return await lookup_visitor(session, id_number, settings)


@router.post("/visitors/{visitor_id}/entry", response_model=EntryRegisteredResponse)
async def register_visitor_entry(
    visitor_id: UUID,
    session: AsyncSession = Depends(get_session),
    settings: Settings = Depends(get_settings),
):
    """Record that an authorized visitor entered"""
    visitor = await register_entry(session, visitor_id, tz=settings.local_timezone)
    return EntryRegisteredResponse(
        message="Ingreso registrado correctamente",
        visitor=VisitorRead.model_validate(visitor),
    )
