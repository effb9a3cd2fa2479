"""
Food Cost backend.

Invoice line-item reconciliation and spend analytics for kitchen operators.
"""

__version__ = "0.1.0"
