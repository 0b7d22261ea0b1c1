"""Utility functions for projectledger."""

from projectledger.utils.date_parser import parse_date
from projectledger.utils.amount_parser import parse_amount

__all__ = ["parse_date", "parse_amount"]
