"""Utility functions for flowertrack."""

from flowertrack.utils.date_parser import parse_date, parse_timestamp
from flowertrack.utils.amount_parser import parse_amount, parse_quantity

__all__ = ["parse_date", "parse_timestamp", "parse_amount", "parse_quantity"]
