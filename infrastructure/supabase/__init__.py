"""Supabase Auth and Storage REST clients"""
from .client import SupabaseAPIError, SupabaseClient
from .auth import SupabaseAuthClient
from .storage import SupabaseStorageClient

__all__ = [
    "SupabaseAPIError",
    "SupabaseClient",
    "SupabaseAuthClient",
    "SupabaseStorageClient",
]
