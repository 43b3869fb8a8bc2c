"""
Event service for event, invitation and guest business logic.
"""
import logging
import uuid
from typing import List, Optional
from sqlalchemy.orm import Session
from gatherly.core.config import settings
from gatherly.models.event import (
    Event, Need, Destination, Invitee, NeedStatus, InvitationStatus
)
from gatherly.schemas.event import EventCreate, EventUpdate, InviteeCreate, NeedCreate

logger = logging.getLogger(__name__)


class NeedAlreadyClaimedError(ValueError):
    """Raised when a guest tries to claim a need someone else holds."""


class InvalidClaimError(ValueError):
    """Raised when a need is assigned to someone outside the event."""


def generate_guest_token() -> str:
    """Create an unguessable token for a guest link."""
    return uuid.uuid4().hex


def guest_link(token: str) -> str:
    return f"{settings.GUEST_LINK_BASE_URL.rstrip('/')}/{token}"


def _build_need(need_data: NeedCreate) -> Need:
    return Need(
        item=need_data.item,
        cost=need_data.cost,
        claimed_by=need_data.claimed_by,
        status=NeedStatus.CLAIMED if need_data.claimed_by else NeedStatus.OPEN
    )


def _check_claimers(needs: List[NeedCreate], allowed: set) -> None:
    """Needs may only be claimed by the host or a guest who has not declined."""
    for need in needs:
        if need.claimed_by and need.claimed_by not in allowed:
            raise InvalidClaimError(
                f"Need '{need.item}' cannot be claimed by {need.claimed_by!r}"
            )


def _build_invitee(invitee_data: InviteeCreate, invitation: InvitationStatus) -> Invitee:
    return Invitee(
        name=invitee_data.name,
        email_or_phone=invitee_data.email_or_phone,
        reminder_preference=invitee_data.reminder_preference,
        invitation=invitation,
        token=generate_guest_token(),
        claimed_items=[]
    )


def create_event(event_data: EventCreate, db: Session) -> Event:
    """Create an event together with its needs, destinations and invitees."""
    _check_claimers(
        event_data.needs,
        {event_data.creator, event_data.host_name} | {i.name for i in event_data.invitees}
    )

    event = Event(
        name=event_data.name,
        description=event_data.description,
        date=event_data.date,
        location=event_data.location,
        creator=event_data.creator,
        host_name=event_data.host_name,
        event_type=event_data.event_type,
        reminder_method=event_data.reminder_method,
        language_preference=event_data.language_preference,
        dresscode=event_data.dresscode,
        agenda=event_data.agenda,
        manifesto=event_data.manifesto
    )
    event.needs = [_build_need(n) for n in event_data.needs]
    event.destinations = [
        Destination(
            name=d.name,
            arrival_date=d.arrival_date,
            departure_date=d.departure_date,
            accommodation=d.accommodation
        )
        for d in event_data.destinations
    ]
    event.invitees = [_build_invitee(i, InvitationStatus.PENDING) for i in event_data.invitees]

    db.add(event)
    db.flush()
    for invitee in event.invitees:
        invitee.claimed_items = [n.id for n in event.needs if n.claimed_by == invitee.name]
    db.commit()
    db.refresh(event)

    logger.info(f"Created {event.event_type.value} event {event.id} for host {event.creator}")
    return event


def update_event(event: Event, event_data: EventUpdate, db: Session) -> Event:
    """Apply the supplied fields to an event. Needs are replaced wholesale."""
    changes = event_data.model_dump(exclude_unset=True, exclude={"needs"})

    if event_data.needs is not None:
        guests = [i for i in event.invitees if i.invitation != InvitationStatus.REJECTED]
        _check_claimers(
            event_data.needs,
            {event.creator, event.host_name} | {g.name for g in guests}
        )

    for field, value in changes.items():
        setattr(event, field, value)

    if event_data.needs is not None:
        event.needs = [_build_need(n) for n in event_data.needs]
        db.flush()
        # Old need ids are gone; rebuild guest claims from the new list
        for invitee in event.invitees:
            if invitee.invitation == InvitationStatus.REJECTED:
                invitee.claimed_items = []
                continue
            invitee.claimed_items = [n.id for n in event.needs if n.claimed_by == invitee.name]

    db.commit()
    db.refresh(event)
    return event


def add_invitees(event: Event, invitees: List[InviteeCreate], db: Session) -> List[Invitee]:
    """
    Append invitees to an event and mark their invitations as sent.
    Delivery is external; the guest links are logged for the notifier.
    """
    new_invitees = [_build_invitee(i, InvitationStatus.SENT) for i in invitees]
    event.invitees.extend(new_invitees)
    db.commit()

    for invitee in new_invitees:
        db.refresh(invitee)
        logger.info(
            f"Invitation for event {event.id} issued to {invitee.name} "
            f"via {invitee.reminder_preference.value if invitee.reminder_preference else 'default'}: "
            f"{guest_link(invitee.token)}"
        )
    return new_invitees


def get_invitee_by_token(token: str, db: Session) -> Optional[Invitee]:
    return db.query(Invitee).filter(Invitee.token == token).first()


def find_need(event: Event, need_id: int) -> Optional[Need]:
    return next((n for n in event.needs if n.id == need_id), None)


def respond_to_invitation(invitee: Invitee, has_accepted: bool, db: Session) -> Invitee:
    """Record a guest's answer. Declining releases any needs they claimed."""
    invitee.invitation = InvitationStatus.ACCEPTED if has_accepted else InvitationStatus.REJECTED

    if not has_accepted:
        for need in invitee.event.needs:
            if need.id in invitee.claimed_items:
                need.claimed_by = None
                need.status = NeedStatus.OPEN
        invitee.claimed_items = []

    db.commit()
    db.refresh(invitee)
    logger.info(f"Guest {invitee.name} answered event {invitee.event_id}: {invitee.invitation.value}")
    return invitee


def claim_need(invitee: Invitee, need: Need, db: Session) -> Need:
    """Claim an open need for a guest. Claiming one's own need again is a no-op."""
    if need.status == NeedStatus.CLAIMED and need.claimed_by != invitee.name:
        raise NeedAlreadyClaimedError(f"Need {need.id} is already claimed")

    need.claimed_by = invitee.name
    need.status = NeedStatus.CLAIMED
    if need.id not in invitee.claimed_items:
        # Reassign so SQLAlchemy sees the JSON column change
        invitee.claimed_items = invitee.claimed_items + [need.id]

    db.commit()
    db.refresh(need)
    logger.info(f"Guest {invitee.name} claimed need {need.id} ({need.item})")
    return need


def update_need_cost(need: Need, cost, db: Session) -> Need:
    """Record the actual cost of a need."""
    need.cost = cost
    db.commit()
    db.refresh(need)
    return need
