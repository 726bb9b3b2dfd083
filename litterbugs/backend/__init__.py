"""
Litterbugs - Backend Module
Gateway contract and the hosted Supabase implementation.
"""

from litterbugs.backend.gateway import BackendGateway
from litterbugs.backend.supabase import SupabaseGateway, error_for_response

__all__ = [
    "BackendGateway",
    "SupabaseGateway",
    "error_for_response",
]
