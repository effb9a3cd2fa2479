"""
Supabase client factory.

The confirmed invoice collection lives in a Supabase table. This module only
builds the client; the table is read and appended to by
foodcost.services.invoice_service.
"""

import logging

from foodcost.config import settings
from supabase import Client, create_client

logger = logging.getLogger(__name__)


def get_supabase_client() -> Client:
    """
    Create a Supabase client for the invoice store.

    Returns:
        A Supabase client built from SUPABASE_URL and SUPABASE_PUBLISHABLE_KEY.

    Example:
        >>> client = get_supabase_client()
        >>> result = client.table("confirmed_invoice").select("*").execute()
    """
    client: Client = create_client(
        supabase_url=settings.SUPABASE_URL,
        supabase_key=settings.SUPABASE_PUBLISHABLE_KEY
    )

    logger.debug("Created Supabase client for the invoice store")

    return client
