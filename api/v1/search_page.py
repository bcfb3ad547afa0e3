"""Public search page.

Server-rendered counterpart of the public API: a cedula form, the
authorized / denied / not-found result card and the entry-registration button.
Errors are shown as a notice on the page instead of an error response.
"""

from __future__ import annotations

import logging
from datetime import datetime
from html import escape
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends
from fastapi.responses import HTMLResponse, RedirectResponse
from sqlmodel.ext.asyncio.session import AsyncSession

from api.v1.public import VisitorLookupResponse, lookup_visitor
from config import Settings, get_settings
from domain.access import AccessDecision, TzLike, as_aware_utc, get_zone
from domain.entry import register_entry
from domain.errors import VisitorControlError
from infrastructure.database import get_session

logger = logging.getLogger(__name__)

router = APIRouter()


def _page(body: str, notice: str = "", notice_class: str = "bad") -> str:
    notice_html = f"<p class='notice {notice_class}'>{escape(notice)}</p>" if notice else ""
    return f"""<!doctype html>
<html lang='es'>
<head>
  <meta charset='utf-8'/>
  <meta name='viewport' content='width=device-width, initial-scale=1'/>
  <title>Control de Visitantes</title>
  <style>
    body {{ font-family: system-ui, -apple-system, Segoe UI, Roboto, Arial; margin: 0; background:#0b1220; color:#eef2ff; }}
    .card {{ max-width: 720px; margin: 24px auto; background:#111a2e; border:1px solid #223055; border-radius: 16px; padding: 24px; }}
    .card.ok {{ border:4px solid #58d68d; }}
    .card.bad {{ border:4px solid #ff6b6b; }}
    .muted {{ color:#b7c2e0; }}
    .ok {{ color:#58d68d; }}
    .bad {{ color:#ff6b6b; }}
    input {{ font-size: 1.2rem; padding: 10px; width: 100%; box-sizing: border-box; border-radius: 8px; }}
    button {{ font-size: 1.1rem; padding: 10px 20px; margin-top: 12px; border-radius: 8px; cursor: pointer; }}
    img.photo {{ width: 96px; height: 96px; object-fit: cover; border-radius: 8px; float: right; }}
  </style>
</head>
<body>
  <div class='card'>
    <h1>Control de Visitantes</h1>
    <form method='get' action='/' onsubmit="this.querySelector('button').disabled = true">
      <label for='cedula'>Buscar por Cédula</label>
      <input id='cedula' name='cedula' inputmode='numeric' pattern='[0-9]*' placeholder='Ingrese número de cédula'/>
      <button type='submit'>Consultar</button>
    </form>
    {notice_html}
  </div>
  {body}
</body>
</html>"""


def _local(dt: datetime, tz: TzLike) -> datetime:
    return as_aware_utc(dt).astimezone(get_zone(tz))


def _result_card(result: VisitorLookupResponse, tz: TzLike = "UTC") -> str:
    if result.decision == AccessDecision.NOT_FOUND:
        return f"""<div class='card bad'>
    <h2 class='bad'>{escape(result.title)}</h2>
    <p>{escape(result.message or "")}</p>
  </div>"""

    visitor = result.visitor
    allowed = result.decision == AccessDecision.AUTHORIZED
    rows = []
    if visitor.photo_url:
        rows.append(f"<img class='photo' src='{escape(visitor.photo_url)}' alt='{escape(visitor.full_name)}'/>")
    rows.append(f"<h2 class='{'ok' if allowed else 'bad'}'>{escape(result.title)}</h2>")
    rows.append(f"<p><strong>{escape(visitor.full_name)}</strong></p>")
    rows.append(f"<p class='muted'>Cédula: {escape(visitor.id_number)}</p>")
    if visitor.company:
        rows.append(f"<p>Empresa: {escape(visitor.company)}</p>")
    rows.append(f"<p>Autorizado hasta: {visitor.authorization_expiry.strftime('%d/%m/%Y')}</p>")
    if result.expired:
        rows.append(f"<p class='bad'><strong>{escape(result.message or '')}</strong></p>")
    for field in result.custom_fields:
        rows.append(f"<p><strong>{escape(field['label'])}:</strong> {escape(field['value'])}</p>")
    if visitor.notes:
        rows.append(f"<p class='muted'><strong>Observaciones:</strong> {escape(visitor.notes)}</p>")
    if visitor.last_entry_at:
        rows.append(f"<p class='muted'>Último ingreso: {_local(visitor.last_entry_at, tz).strftime('%d/%m/%Y %H:%M')}</p>")
    if result.can_register_entry:
        rows.append(
            f"<form method='post' action='/entry/{visitor.id}' "
            "onsubmit=\"this.querySelector('button').disabled = true\">"
            "<button type='submit'>Registrar Ingreso</button></form>"
        )
    rows.append(f"<p class='muted'>Consulta realizada: {_local(result.searched_at, tz).strftime('%d/%m/%Y %H:%M:%S')}</p>")

    body = "\n    ".join(rows)
    return f"""<div class='card {'ok' if allowed else 'bad'}'>
    {body}
  </div>"""


@router.get("/", response_class=HTMLResponse)
async def search_page(
    cedula: Optional[str] = None,
    registered: bool = False,
    session: AsyncSession = Depends(get_session),
    settings: Settings = Depends(get_settings),
):
    if cedula is None:
        return HTMLResponse(_page(""))

    try:
        result = await lookup_visitor(session, cedula, settings)
    except VisitorControlError as e:
        return HTMLResponse(_page("", notice=e.message), status_code=e.status_code)

    entered = result.visitor is not None and result.visitor.last_entry_at is not None
    notice = "Ingreso registrado correctamente" if registered and entered else ""
    card = _result_card(result, tz=settings.local_timezone)
    return HTMLResponse(_page(card, notice=notice, notice_class="ok"))


@router.post("/entry/{visitor_id}", response_class=HTMLResponse)
async def register_entry_from_page(
    visitor_id: UUID,
    session: AsyncSession = Depends(get_session),
    settings: Settings = Depends(get_settings),
):
    try:
        visitor = await register_entry(session, visitor_id, tz=settings.local_timezone)
    except VisitorControlError as e:
        return HTMLResponse(_page("", notice=e.message), status_code=e.status_code)

    return RedirectResponse(f"/?cedula={visitor.id_number}&registered=true", status_code=303)
