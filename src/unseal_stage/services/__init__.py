# src/unseal_stage/services/__init__.py
"""Business logic services for the Unseal application."""

from .context import RequestContext
from .messages import MessageState, MessageStore, MessageView
from .partnership import PairingState, PairingStatus, PartnershipManager, RelationshipStats
from .streak import StreakCalculator

__all__ = [
    "RequestContext",
    "MessageState", "MessageStore", "MessageView",
    "PairingState", "PairingStatus", "PartnershipManager", "RelationshipStats",
    "StreakCalculator",
]
