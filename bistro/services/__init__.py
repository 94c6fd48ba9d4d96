"""
                        Services Module

Business logic on top of the document store.

Services:
    - resources: per-collection CRUD handlers
    - settlement: payment recording and cart cleanup
    - reporting: admin dashboard aggregates
    - payment: Stripe / mock payment intents
"""

from bistro.services.reporting import ReportingAggregator
from bistro.services.resources import Resources
from bistro.services.settlement import SettlementProcessor

__all__ = ["ReportingAggregator", "Resources", "SettlementProcessor"]
