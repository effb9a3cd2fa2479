"""
Constants shared by the reconciliation engine and the analytics aggregator.
"""

from decimal import Decimal

# Window selector -> number of trailing calendar days (today inclusive)
WINDOW_DAYS = {
    '7d': 7,
    '30d': 30,
    '90d': 90,
}

# Line item dispositions (matches the Disposition literal in schemas)
DISPOSITIONS = ('normal', 'credited', 'returned')

# Money is stored and reported in cents
CENT = Decimal('0.01')

# Page size used when scanning the confirmed invoice table
# (Supabase caps a single select at 1000 rows by default)
STORE_PAGE_SIZE = 1000
