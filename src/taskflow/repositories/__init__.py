"""Repository layer for remote data access."""

from .protocol import AssociationTable, IdentityProvider, RecordTable, RemoteStore
from .supabase import SupabaseRemoteStore, SupabaseTable

__all__ = [
    "AssociationTable",
    "IdentityProvider",
    "RecordTable",
    "RemoteStore",
    "SupabaseRemoteStore",
    "SupabaseTable",
]
