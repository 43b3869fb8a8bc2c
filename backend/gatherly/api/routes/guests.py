"""
Guest routes, addressed by the private token in each invitation link.
"""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from gatherly.db.session import get_db
from gatherly.models.event import Invitee, InvitationStatus
from gatherly.schemas.event import (
    GuestEventResponse, GuestInvitee, InvitationAccept, NeedResponse, DestinationResponse
)
from gatherly.services import event_service

router = APIRouter(prefix="/events", tags=["guests"])


def get_invitee_or_404(token: str, db: Session) -> Invitee:
    """Resolve a guest token or raise 404."""
    invitee = event_service.get_invitee_by_token(token, db)
    if not invitee:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Invitation not found"
        )
    return invitee


@router.get("/guest/{token}", response_model=GuestEventResponse)
async def get_guest_event(
    token: str,
    db: Session = Depends(get_db)
):
    """Get the event as seen by one guest."""
    invitee = get_invitee_or_404(token, db)
    event = invitee.event

    return GuestEventResponse(
        id=event.id,
        name=event.name,
        description=event.description,
        date=event.date,
        location=event.location,
        host_name=event.host_name,
        event_type=event.event_type,
        needs=[NeedResponse.model_validate(n) for n in event.needs],
        destinations=[DestinationResponse.model_validate(d) for d in event.destinations],
        invitee=GuestInvitee(
            name=invitee.name,
            email_or_phone=invitee.email_or_phone,
            invitation=invitee.invitation,
            has_accepted=invitee.invitation == InvitationStatus.ACCEPTED,
            claimed_items=invitee.claimed_items
        )
    )


@router.put("/invitee/{token}/accept")
async def accept_invitation(
    token: str,
    answer: InvitationAccept,
    db: Session = Depends(get_db)
):
    """Accept or decline an invitation."""
    invitee = get_invitee_or_404(token, db)
    invitee = event_service.respond_to_invitation(invitee, answer.has_accepted, db)
    return {"message": "Invitation updated", "invitation": invitee.invitation.value}


@router.put("/invitee/{token}/needs/{need_id}/claim", response_model=NeedResponse)
async def claim_need(
    token: str,
    need_id: int,
    db: Session = Depends(get_db)
):
    """Claim a need on behalf of the guest."""
    invitee = get_invitee_or_404(token, db)
    if invitee.invitation == InvitationStatus.REJECTED:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Declined guests cannot claim needs"
        )

    need = event_service.find_need(invitee.event, need_id)
    if not need:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Need not found"
        )

    try:
        return event_service.claim_need(invitee, need, db)
    except event_service.NeedAlreadyClaimedError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(e)
        )
