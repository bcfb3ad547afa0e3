"""Supabase Auth (GoTrue) client: sessions and admin user management"""
import logging
from typing import Any, Dict, Optional

from domain.errors import NotAuthenticatedError, NotFoundError, ValidationError
from .client import SupabaseAPIError, SupabaseClient

logger = logging.getLogger(__name__)


class SupabaseAuthClient(SupabaseClient):
    service = "auth/v1"

    async def sign_in_with_password(self, email: str, password: str) -> Dict[str, Any]:
        """Returns the session: access_token, refresh_token, expires_in, user"""
        try:
            return await self._request(
                "POST",
                "token",
                params={"grant_type": "password"},
                json={"email": email, "password": password},
            )
        except SupabaseAPIError as e:
            raise NotAuthenticatedError("Credenciales inválidas") from e

    async def get_user(self, access_token: str) -> Dict[str, Any]:
        """Validate an access token and return its user"""
        try:
            return await self._request("GET", "user", bearer=access_token)
        except SupabaseAPIError as e:
            raise NotAuthenticatedError() from e

    async def sign_out(self, access_token: str) -> None:
        try:
            await self._request("POST", "logout", bearer=access_token)
        except SupabaseAPIError as e:
            # Already invalid: nothing left to revoke
            logger.info(f"Sign-out for an invalid session: {e}")

    # === Admin API (service role) ===

    async def admin_create_user(
        self,
        email: str,
        password: str,
        full_name: Optional[str] = None,
    ) -> Dict[str, Any]:
        try:
            return await self._request(
                "POST",
                "admin/users",
                admin=True,
                json={
                    "email": email,
                    "password": password,
                    "email_confirm": True,
                    "user_metadata": {"full_name": full_name or ""},
                },
            )
        except SupabaseAPIError as e:
            raise ValidationError(f"Error al crear usuario: {e.message}") from e

    async def admin_get_user(self, user_id: str) -> Dict[str, Any]:
        try:
            return await self._request("GET", f"admin/users/{user_id}", admin=True)
        except SupabaseAPIError as e:
            if e.status_code == 404:
                raise NotFoundError("Usuario no encontrado") from e
            raise ValidationError(e.message) from e

    async def admin_delete_user(self, user_id: str) -> None:
        try:
            await self._request("DELETE", f"admin/users/{user_id}", admin=True)
        except SupabaseAPIError as e:
            if e.status_code == 404:
                raise NotFoundError("Usuario no encontrado") from e
            raise ValidationError("Error al eliminar usuario") from e
