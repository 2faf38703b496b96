"""Ordering bounded context: checkout and order placement.

Prices cart lines against the catalogue read model, simulates the card
payment, and persists the resulting Order aggregate in one unit of work.
"""

import structlog
from protean.domain import Domain

ordering = Domain(name="ordering")

logger = structlog.get_logger(__name__)
