"""
API routes for the Food Cost backend.

Routers:
- health: liveness probe
- invoices: draft reconciliation, confirmation and retrieval
- dashboard: spend analytics
"""
