"""Entry registration.

Recording an entry is a single UPDATE at the store: it matches the visitor by
id, re-checks the authorization window on the store side and only ever moves
``last_entry_at`` forward. Two simultaneous scans therefore both land in the
database and the later timestamp wins. The UPDATE returns the refreshed row,
so nothing else touches the store once the entry is committed.
"""
import logging
from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlalchemy import case, literal, or_, update
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from config import get_settings
from domain.access import TzLike, as_aware_utc, earliest_valid_expiry
from domain.errors import NotFoundError, RegistrationDeniedError, StoreUnavailableError
from domain.models import Visitor
from domain.models.columns import UTCDateTime, utc_now
from infrastructure.database import STORE_ERRORS

logger = logging.getLogger(__name__)


async def register_entry(
    session: AsyncSession,
    visitor_id: UUID,
    now: Optional[datetime] = None,
    tz: Optional[TzLike] = None,
) -> Visitor:
    """Set ``last_entry_at`` on an authorized visitor and return the refreshed row"""
    tz = tz or get_settings().local_timezone
    now = as_aware_utc(now) if now else utc_now()
    stamp = literal(now, UTCDateTime())

    stmt = (
        update(Visitor)
        .where(
            Visitor.id == visitor_id,
            Visitor.authorized.is_(True),
            Visitor.authorization_expiry >= earliest_valid_expiry(now, tz),
        )
        .values(
            last_entry_at=case(
                (or_(Visitor.last_entry_at.is_(None), Visitor.last_entry_at < stamp), stamp),
                else_=Visitor.last_entry_at,
            )
        )
        .returning(Visitor)
        .execution_options(populate_existing=True)
    )

    try:
        result = await session.execute(stmt)
        visitor = result.scalars().one_or_none()

        if visitor is None:
            # Nothing changed; only tell a missing visitor from a denied one
            exists = await session.execute(select(Visitor.id).where(Visitor.id == visitor_id))
            found = exists.first() is not None
        else:
            await session.commit()
    except STORE_ERRORS as e:
        await session.rollback()
        logger.error(f"Entry registration for {visitor_id} failed: {e}")
        raise StoreUnavailableError("Error al registrar ingreso") from e

    if visitor is None:
        if not found:
            raise NotFoundError("Visitante no encontrado")
        logger.warning(f"Entry registration denied for visitor {visitor_id}")
        raise RegistrationDeniedError()

    logger.info(f"Entry registered for visitor {visitor_id} at {visitor.last_entry_at}")
    return visitor
