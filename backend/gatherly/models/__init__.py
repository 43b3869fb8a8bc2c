"""Models package - Import all models for SQLAlchemy registration."""
from gatherly.models.event import (
    Event, Need, Destination, Invitee,
    EventType, NeedStatus, InvitationStatus, ReminderMethod, Language
)
from gatherly.models.settlement import SettlementResult, PaymentRequest

__all__ = [
    "Event",
    "Need",
    "Destination",
    "Invitee",
    "EventType",
    "NeedStatus",
    "InvitationStatus",
    "ReminderMethod",
    "Language",
    "SettlementResult",
    "PaymentRequest",
]
