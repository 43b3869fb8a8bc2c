"""
Event management routes for hosts.
"""
from fastapi import APIRouter, Depends, HTTPException, status, Response
from sqlalchemy.orm import Session
from typing import List, Optional
from gatherly.db.session import get_db
from gatherly.models.event import Event
from gatherly.schemas.event import (
    EventCreate, EventUpdate, EventResponse, InvitationSend,
    InviteeResponse, NeedCostUpdate, NeedResponse
)
from gatherly.services import event_service

router = APIRouter(prefix="/events", tags=["events"])


def get_event_or_404(event_id: int, db: Session) -> Event:
    """Load an event or raise 404."""
    event = db.query(Event).filter(Event.id == event_id).first()
    if not event:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Event not found"
        )
    return event


@router.post("", response_model=EventResponse, status_code=status.HTTP_201_CREATED)
async def create_event(
    event_data: EventCreate,
    db: Session = Depends(get_db)
):
    """Create a new event."""
    try:
        return event_service.create_event(event_data, db)
    except event_service.InvalidClaimError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )


@router.get("", response_model=List[EventResponse])
async def list_events(
    creator: Optional[str] = None,
    db: Session = Depends(get_db)
):
    """List events, optionally only those created by one host."""
    query = db.query(Event)
    if creator:
        query = query.filter(Event.creator == creator)
    return query.order_by(Event.date).all()


@router.get("/{event_id}", response_model=EventResponse)
async def get_event(
    event_id: int,
    db: Session = Depends(get_db)
):
    """Get event details."""
    return get_event_or_404(event_id, db)


@router.put("/{event_id}", response_model=EventResponse)
async def update_event(
    event_id: int,
    event_data: EventUpdate,
    db: Session = Depends(get_db)
):
    """Update event details and needs."""
    event = get_event_or_404(event_id, db)
    try:
        return event_service.update_event(event, event_data, db)
    except event_service.InvalidClaimError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )


@router.delete("/{event_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_event(
    event_id: int,
    db: Session = Depends(get_db)
):
    """Delete an event and everything attached to it."""
    event = get_event_or_404(event_id, db)
    db.delete(event)
    db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{event_id}/invite", response_model=List[InviteeResponse])
async def send_invitations(
    event_id: int,
    invitation: InvitationSend,
    db: Session = Depends(get_db)
):
    """Invite guests to an event."""
    event = get_event_or_404(event_id, db)
    return event_service.add_invitees(event, invitation.invitees, db)


@router.put("/{event_id}/needs/{need_id}/cost", response_model=NeedResponse)
async def update_need_cost(
    event_id: int,
    need_id: int,
    cost_update: NeedCostUpdate,
    db: Session = Depends(get_db)
):
    """Record what a need actually cost."""
    event = get_event_or_404(event_id, db)
    need = event_service.find_need(event, need_id)
    if not need:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Need not found"
        )
    return event_service.update_need_cost(need, cost_update.cost, db)
