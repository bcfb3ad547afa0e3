"""
Supabase REST base client
Shared request plumbing for the Auth (GoTrue) and Storage APIs
https://supabase.com/docs/reference/api
"""
import logging
from typing import Optional, Dict, Any

import httpx

from config import Settings, get_settings
from domain.errors import StoreUnavailableError

logger = logging.getLogger(__name__)


class SupabaseAPIError(Exception):
    """Non-2xx answer from a Supabase API"""

    def __init__(self, status_code: int, message: str):
        self.status_code = status_code
        self.message = message
        super().__init__(f"{status_code}: {message}")


class SupabaseClient:
    """Base client for one Supabase REST API"""

    service = ""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.settings = settings or get_settings()
        self.base_url = self.settings.supabase_url.rstrip("/")
        self.anon_key = self.settings.supabase_anon_key
        self.service_key = self.settings.supabase_service_role_key
        self.timeout = self.settings.http_timeout_seconds
        self._transport = transport

    def _headers(self, bearer: Optional[str] = None, admin: bool = False) -> Dict[str, str]:
        key = self.service_key if admin else self.anon_key
        return {
            "apikey": key,
            "Authorization": f"Bearer {bearer or key}",
        }

    async def _request(
        self,
        method: str,
        endpoint: str,
        *,
        bearer: Optional[str] = None,
        admin: bool = False,
        json: Optional[Dict[str, Any]] = None,
        content: Optional[bytes] = None,
        params: Optional[Dict[str, str]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Any:
        """Make request to a Supabase API, raising on transport or HTTP errors"""
        url = f"{self.base_url}/{self.service}/{endpoint}"
        request_headers = self._headers(bearer=bearer, admin=admin)
        if headers:
            request_headers.update(headers)

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.request(
                    method,
                    url,
                    headers=request_headers,
                    params=params,
                    json=json,
                    content=content,
                )
        except httpx.HTTPError as e:
            logger.error(f"Supabase {self.service} request failed: {e}")
            raise StoreUnavailableError() from e

        if response.status_code >= 500:
            logger.error(f"Supabase {self.service} error: {response.status_code} - {response.text}")
            raise StoreUnavailableError()

        if response.status_code >= 400:
            logger.warning(f"Supabase {self.service} rejected {method} {endpoint}: {response.status_code} - {response.text}")
            raise SupabaseAPIError(response.status_code, _error_message(response))

        if not response.content:
            return None
        return response.json()


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text
    if isinstance(body, dict):
        for key in ("msg", "message", "error_description", "error"):
            if body.get(key):
                return str(body[key])
    return response.text
