"""
NFL Offseason Module

Offseason consumers of the final standings.

Main Components:
- DraftOrderService: First-round draft order from seeding and playoff results
- DraftPick: Single draft slot, possibly with a pick range
"""

from offseason.draft_order_service import DraftOrderService, DraftPick

__all__ = [
    'DraftOrderService',
    'DraftPick',
]
