"""Supabase API access."""

from .client import SupabaseClient

__all__ = ["SupabaseClient"]
