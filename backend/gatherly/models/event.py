"""
Event model and its embedded records: needs, destinations and invitees.
"""
from sqlalchemy import Column, String, Date, DateTime, Enum as SQLEnum, ForeignKey, Integer, Numeric, Text, JSON
from sqlalchemy.orm import relationship
from gatherly.db.base import BaseModel
import enum


class EventType(str, enum.Enum):
    """Kinds of event a host can plan."""
    EATERY = "eatery"
    TRIP = "trip"
    BIZMEET = "bizmeet"
    PROTEST = "protest"


class ReminderMethod(str, enum.Enum):
    EMAIL = "email"
    SMS = "sms"


class Language(str, enum.Enum):
    EN = "en"
    ES = "es"


class NeedStatus(str, enum.Enum):
    OPEN = "open"
    CLAIMED = "claimed"


class InvitationStatus(str, enum.Enum):
    """Invitation lifecycle for a single guest."""
    PENDING = "pending"
    SENT = "sent"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class Event(BaseModel):
    """Event model representing a gathering organised by a host."""
    __tablename__ = "events"

    name = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    date = Column(DateTime, nullable=False, index=True)
    location = Column(String(200), nullable=False)
    creator = Column(String(255), nullable=False, index=True)  # Opaque host id from the identity provider
    host_name = Column(String(100), nullable=False)
    event_type = Column(SQLEnum(EventType), nullable=False)
    reminder_method = Column(SQLEnum(ReminderMethod), nullable=True)
    language_preference = Column(SQLEnum(Language), default=Language.EN, nullable=False)

    # Business meeting
    dresscode = Column(String(200), nullable=True)
    agenda = Column(Text, nullable=True)

    # Protest
    manifesto = Column(Text, nullable=True)

    # Relationships
    needs = relationship("Need", back_populates="event", cascade="all, delete-orphan", order_by="Need.id")
    destinations = relationship("Destination", back_populates="event", cascade="all, delete-orphan", order_by="Destination.id")
    invitees = relationship("Invitee", back_populates="event", cascade="all, delete-orphan", order_by="Invitee.id")
    settlement_results = relationship("SettlementResult", back_populates="event", cascade="all, delete-orphan")
    payment_requests = relationship("PaymentRequest", back_populates="event", cascade="all, delete-orphan")


class Need(BaseModel):
    """An item or cost the event needs someone to cover."""
    __tablename__ = "needs"

    event_id = Column(Integer, ForeignKey("events.id"), nullable=False, index=True)
    item = Column(String(100), nullable=False)
    cost = Column(Numeric(15, 2), nullable=True)
    claimed_by = Column(String(255), nullable=True)  # Invitee name or host creator id
    status = Column(SQLEnum(NeedStatus), default=NeedStatus.OPEN, nullable=False)

    event = relationship("Event", back_populates="needs")


class Destination(BaseModel):
    """A stop on a trip."""
    __tablename__ = "destinations"

    event_id = Column(Integer, ForeignKey("events.id"), nullable=False, index=True)
    name = Column(String(200), nullable=False)
    arrival_date = Column(Date, nullable=False)
    departure_date = Column(Date, nullable=False)
    accommodation = Column(String(200), nullable=False)

    event = relationship("Event", back_populates="destinations")


class Invitee(BaseModel):
    """A guest invited to an event, addressed by a private token."""
    __tablename__ = "invitees"

    event_id = Column(Integer, ForeignKey("events.id"), nullable=False, index=True)
    name = Column(String(100), nullable=False)
    email_or_phone = Column(String(255), nullable=False)
    invitation = Column(SQLEnum(InvitationStatus), default=InvitationStatus.PENDING, nullable=False)
    reminder_preference = Column(SQLEnum(ReminderMethod), nullable=True)
    token = Column(String(64), unique=True, nullable=False, index=True)
    claimed_items = Column(JSON, nullable=False, default=list)  # Need ids claimed by this guest

    event = relationship("Event", back_populates="invitees")
