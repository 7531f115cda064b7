"""Inventory, point-of-sale, staff and budget tracking for a hardware store."""

__version__ = "1.0.0"
