"""
Domain errors raised by the reconciliation engine and analytics aggregator.

Routes translate these into HTTP responses; the pure services never catch them.
"""

from typing import Optional


class FoodCostError(Exception):
    """Base class for Food Cost domain errors."""


class DataError(FoodCostError):
    """
    A line item or stored invoice carries data the arithmetic cannot trust.

    Attributes:
        item_id: Identifier of the offending line item (or invoice), if known
    """

    def __init__(self, message: str, item_id: Optional[str] = None):
        self.item_id = item_id
        if item_id is not None:
            message = f"{message} (item_id={item_id})"
        super().__init__(message)


class ConfigError(FoodCostError):
    """An unknown window selector, limit or timezone was requested."""
