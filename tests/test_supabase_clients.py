"""Supabase REST clients against a mocked transport"""
import json

import httpx
import pytest

from config import Settings
from domain.errors import NotAuthenticatedError, NotFoundError, StoreUnavailableError, ValidationError
from infrastructure.supabase import SupabaseAuthClient, SupabaseStorageClient


@pytest.fixture
def settings():
    return Settings(
        supabase_url="https://supabase.test/",
        supabase_anon_key="anon-key",
        supabase_service_role_key="service-key",
        photo_bucket="visitor-photos",
    )


def recording_transport(handler):
    requests = []

    def _handle(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return handler(request)

    return httpx.MockTransport(_handle), requests


async def test_sign_in_posts_password_grant(settings):
    session = {"access_token": "tok", "user": {"id": "u1", "email": "a@example.com"}}
    transport, requests = recording_transport(lambda r: httpx.Response(200, json=session))
    auth = SupabaseAuthClient(settings, transport=transport)

    result = await auth.sign_in_with_password("a@example.com", "secret123")

    assert result == session
    request = requests[0]
    assert request.method == "POST"
    assert request.url.path == "/auth/v1/token"
    assert request.url.params["grant_type"] == "password"
    assert request.headers["apikey"] == "anon-key"
    assert request.headers["authorization"] == "Bearer anon-key"
    assert json.loads(request.content) == {"email": "a@example.com", "password": "secret123"}


async def test_sign_in_rejected(settings):
    transport, _ = recording_transport(
        lambda r: httpx.Response(400, json={"error_description": "Invalid login credentials"})
    )
    auth = SupabaseAuthClient(settings, transport=transport)

    with pytest.raises(NotAuthenticatedError) as exc:
        await auth.sign_in_with_password("a@example.com", "wrong")

    assert exc.value.message == "Credenciales inválidas"


async def test_get_user_sends_the_access_token(settings):
    transport, requests = recording_transport(lambda r: httpx.Response(200, json={"id": "u1"}))
    auth = SupabaseAuthClient(settings, transport=transport)

    assert await auth.get_user("user-token") == {"id": "u1"}
    assert requests[0].headers["authorization"] == "Bearer user-token"
    assert requests[0].headers["apikey"] == "anon-key"


async def test_get_user_with_expired_token(settings):
    transport, _ = recording_transport(lambda r: httpx.Response(401, json={"msg": "JWT expired"}))
    auth = SupabaseAuthClient(settings, transport=transport)

    with pytest.raises(NotAuthenticatedError):
        await auth.get_user("old-token")


async def test_sign_out_tolerates_invalid_session(settings):
    transport, requests = recording_transport(lambda r: httpx.Response(401, json={"msg": "invalid"}))
    auth = SupabaseAuthClient(settings, transport=transport)

    await auth.sign_out("old-token")

    assert requests[0].url.path == "/auth/v1/logout"


async def test_admin_calls_use_the_service_role_key(settings):
    transport, requests = recording_transport(lambda r: httpx.Response(200, json={"id": "u2", "email": "b@example.com"}))
    auth = SupabaseAuthClient(settings, transport=transport)

    user = await auth.admin_create_user("b@example.com", "secret123", "Bea")

    assert user["id"] == "u2"
    request = requests[0]
    assert request.url.path == "/auth/v1/admin/users"
    assert request.headers["apikey"] == "service-key"
    assert request.headers["authorization"] == "Bearer service-key"
    body = json.loads(request.content)
    assert body["email_confirm"] is True
    assert body["user_metadata"] == {"full_name": "Bea"}


async def test_admin_create_user_rejected(settings):
    transport, _ = recording_transport(lambda r: httpx.Response(422, json={"msg": "User already registered"}))
    auth = SupabaseAuthClient(settings, transport=transport)

    with pytest.raises(ValidationError) as exc:
        await auth.admin_create_user("b@example.com", "secret123")

    assert "User already registered" in exc.value.message


async def test_admin_delete_unknown_user(settings):
    transport, requests = recording_transport(lambda r: httpx.Response(404, json={"msg": "User not found"}))
    auth = SupabaseAuthClient(settings, transport=transport)

    with pytest.raises(NotFoundError):
        await auth.admin_delete_user("missing")

    assert requests[0].method == "DELETE"
    assert requests[0].url.path == "/auth/v1/admin/users/missing"


async def test_server_errors_mean_store_unavailable(settings):
    transport, _ = recording_transport(lambda r: httpx.Response(503, text="upstream down"))
    auth = SupabaseAuthClient(settings, transport=transport)

    with pytest.raises(StoreUnavailableError):
        await auth.get_user("tok")


async def test_connection_errors_mean_store_unavailable(settings):
    def refuse(request):
        raise httpx.ConnectError("connection refused", request=request)

    auth = SupabaseAuthClient(settings, transport=httpx.MockTransport(refuse))

    with pytest.raises(StoreUnavailableError):
        await auth.sign_in_with_password("a@example.com", "secret123")


async def test_storage_upload_returns_public_url(settings):
    transport, requests = recording_transport(lambda r: httpx.Response(200, json={"Key": "visitor-photos/1.png"}))
    storage = SupabaseStorageClient(settings, transport=transport)

    url = await storage.upload(b"\x89PNG", "12345-1.png", content_type="image/png")

    assert url == "https://supabase.test/storage/v1/object/public/visitor-photos/12345-1.png"
    request = requests[0]
    assert request.method == "POST"
    assert request.url.path == "/storage/v1/object/visitor-photos/12345-1.png"
    assert request.headers["content-type"] == "image/png"
    assert request.headers["x-upsert"] == "true"
    assert request.headers["authorization"] == "Bearer service-key"
    assert request.content == b"\x89PNG"


async def test_storage_upload_rejected(settings):
    transport, _ = recording_transport(lambda r: httpx.Response(400, json={"message": "Bucket not found"}))
    storage = SupabaseStorageClient(settings, transport=transport)

    with pytest.raises(ValidationError) as exc:
        await storage.upload(b"data", "x.jpg", content_type="image/jpeg")

    assert exc.value.message == "Error al subir la foto"
