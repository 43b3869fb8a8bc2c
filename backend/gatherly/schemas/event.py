"""
Pydantic schemas for Event entity and its guests.
"""
import re
from pydantic import BaseModel, Field, field_validator, model_validator
from typing import List, Optional
from datetime import date, datetime
from decimal import Decimal
from gatherly.models.event import (
    EventType, NeedStatus, InvitationStatus, ReminderMethod, Language
)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


class NeedCreate(BaseModel):
    """Schema for a need supplied by the host."""
    item: str = Field(min_length=1, max_length=100)
    cost: Optional[Decimal] = Field(default=None, ge=0)
    claimed_by: Optional[str] = None


class NeedResponse(BaseModel):
    """Schema for need response."""
    id: int
    item: str
    cost: Optional[Decimal] = None
    claimed_by: Optional[str] = None
    status: NeedStatus

    class Config:
        from_attributes = True


class NeedCostUpdate(BaseModel):
    """Schema for posting the actual cost of a need."""
    cost: Decimal = Field(gt=0)


class DestinationCreate(BaseModel):
    """Schema for a trip destination."""
    name: str = Field(min_length=1, max_length=200)
    arrival_date: date
    departure_date: date
    accommodation: str = Field(min_length=1, max_length=200)

    @model_validator(mode="after")
    def check_dates(self):
        if self.departure_date < self.arrival_date:
            raise ValueError("Departure date must not be before arrival date")
        return self


class DestinationResponse(DestinationCreate):
    id: int

    class Config:
        from_attributes = True


class InviteeCreate(BaseModel):
    """Schema for inviting a guest."""
    name: str = Field(min_length=1, max_length=100)
    email_or_phone: str = Field(min_length=1, max_length=255)
    reminder_preference: Optional[ReminderMethod] = None

    @field_validator("name", "email_or_phone")
    @classmethod
    def strip_whitespace(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Value must not be blank")
        return v

    @field_validator("email_or_phone")
    @classmethod
    def check_email(cls, v: str) -> str:
        """Contacts containing '@' must look like an email address."""
        if "@" in v and not EMAIL_PATTERN.match(v):
            raise ValueError("Invalid email address")
        return v


class InviteeResponse(BaseModel):
    """Schema for invitee response (host view, includes token)."""
    id: int
    name: str
    email_or_phone: str
    invitation: InvitationStatus
    reminder_preference: Optional[ReminderMethod] = None
    token: str
    claimed_items: List[int] = []

    class Config:
        from_attributes = True


class InvitationSend(BaseModel):
    """Schema for sending a batch of invitations."""
    invitees: List[InviteeCreate]


class InvitationAccept(BaseModel):
    """Schema for a guest's answer to an invitation."""
    has_accepted: bool = True


class EventBase(BaseModel):
    """Base event schema."""
    name: str = Field(min_length=3, max_length=100)
    description: Optional[str] = Field(default=None, max_length=1000)
    date: datetime
    location: str = Field(min_length=3, max_length=200)
    host_name: str = Field(min_length=2, max_length=100)
    event_type: EventType
    reminder_method: Optional[ReminderMethod] = None
    language_preference: Language = Language.EN
    dresscode: Optional[str] = None
    agenda: Optional[str] = None
    manifesto: Optional[str] = None


class EventCreate(EventBase):
    """Schema for event creation."""
    creator: str = Field(min_length=1)
    needs: List[NeedCreate] = []
    destinations: List[DestinationCreate] = []
    invitees: List[InviteeCreate] = []

    @model_validator(mode="after")
    def check_event_type_fields(self):
        """Each event type carries its own required fields."""
        if self.event_type == EventType.TRIP and not self.destinations:
            raise ValueError("Trip events require at least one destination")
        if self.event_type == EventType.BIZMEET:
            if not (self.dresscode or "").strip():
                raise ValueError("Dress code is required for business meetings")
            if not (self.agenda or "").strip():
                raise ValueError("Agenda is required for business meetings")
        if self.event_type == EventType.PROTEST and not (self.manifesto or "").strip():
            raise ValueError("Manifesto is required for protests")
        return self


class EventUpdate(BaseModel):
    """Schema for event update."""
    name: Optional[str] = Field(default=None, min_length=3, max_length=100)
    description: Optional[str] = Field(default=None, max_length=1000)
    date: Optional[datetime] = None
    location: Optional[str] = Field(default=None, min_length=3, max_length=200)
    needs: Optional[List[NeedCreate]] = None

    @field_validator("name", "date", "location")
    @classmethod
    def reject_null(cls, v):
        """Required columns can be changed but not cleared."""
        if v is None:
            raise ValueError("Field cannot be null")
        return v


class EventResponse(EventBase):
    """Schema for event response."""
    id: int
    creator: str
    needs: List[NeedResponse] = []
    destinations: List[DestinationResponse] = []
    invitees: List[InviteeResponse] = []
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class GuestInvitee(BaseModel):
    """The calling guest's own invitation record."""
    name: str
    email_or_phone: str
    invitation: InvitationStatus
    has_accepted: bool
    claimed_items: List[int] = []


class GuestEventResponse(BaseModel):
    """Schema for the tokenized guest view of an event."""
    id: int
    name: str
    description: Optional[str] = None
    date: datetime
    location: str
    host_name: str
    event_type: EventType
    needs: List[NeedResponse] = []
    destinations: List[DestinationResponse] = []
    invitee: GuestInvitee
