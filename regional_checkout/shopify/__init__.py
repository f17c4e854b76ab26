"""
Module 'shopify': adaptateur Admin API (draft orders).
"""
from .client import (
    PENDING_TAG,
    admin_url,
    to_line_items,
    build_draft_order,
    create_draft_order,
    complete_draft_order,
)

__all__ = [
    "PENDING_TAG",
    "admin_url",
    "to_line_items",
    "build_draft_order",
    "create_draft_order",
    "complete_draft_order",
]
