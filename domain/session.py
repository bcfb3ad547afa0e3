"""Admin session context and role guards.

The context is resolved once from the bearer token and passed explicitly to
every protected operation; each admin mutation calls one of the guards below
before touching the store.
"""
from dataclasses import dataclass
from typing import Dict, List, Optional
from uuid import UUID

from domain.errors import PermissionDeniedError

ADMIN_ROLES = ("admin", "super_admin")

NAVIGATION = [
    {"title": "Dashboard", "url": "/admin"},
    {"title": "Visitantes", "url": "/admin/visitantes"},
    {"title": "Campos Personalizados", "url": "/admin/campos"},
]
SUPER_ADMIN_NAVIGATION = [
    {"title": "Gestión de Usuarios", "url": "/admin/usuarios"},
]


@dataclass(frozen=True)
class AdminContext:
    user_id: UUID
    email: str
    role: Optional[str]
    access_token: str = ""

    @property
    def is_super_admin(self) -> bool:
        return self.role == "super_admin"

    def navigation(self) -> List[Dict[str, str]]:
        if self.is_super_admin:
            return NAVIGATION + SUPER_ADMIN_NAVIGATION
        return list(NAVIGATION)


def require_admin(ctx: AdminContext) -> AdminContext:
    if ctx.role not in ADMIN_ROLES:
        raise PermissionDeniedError("No tienes un rol asignado. Contacta al administrador.")
    return ctx


def require_super_admin(ctx: AdminContext) -> AdminContext:
    require_admin(ctx)
    if not ctx.is_super_admin:
        raise PermissionDeniedError()
    return ctx
