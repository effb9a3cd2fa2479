"""
Database access layer for the Food Cost backend.

Includes:
- Supabase client initialization

Table access lives in foodcost.services.invoice_service.
"""

from .client import get_supabase_client

__all__ = ["get_supabase_client"]
