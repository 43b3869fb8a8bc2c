"""
Bill split and settlement routes.
"""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List
from gatherly.db.session import get_db
from gatherly.models.settlement import SettlementResult
from gatherly.schemas.settlement import (
    Participant, Transfer, BillSplitResponse, SettlementResultResponse,
    PaymentRequestCreate, PaymentRequestResponse
)
from gatherly.services import settlement_service
from gatherly.services.settlement_service import SettlementInputError
from gatherly.api.routes.events import get_event_or_404

router = APIRouter(tags=["settlement"])


@router.post("/settlement/compute", response_model=List[Transfer])
async def compute_settlement(participants: List[Participant]):
    """Compute transfers for a caller-supplied ledger."""
    try:
        return settlement_service.compute_settlement(participants)
    except SettlementInputError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )


@router.get("/events/{event_id}/bill-split", response_model=BillSplitResponse)
async def get_bill_split(
    event_id: int,
    db: Session = Depends(get_db)
):
    """Get the current bill split for an event."""
    event = get_event_or_404(event_id, db)
    try:
        return settlement_service.calculate_bill_split(event)
    except SettlementInputError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )


@router.post("/settlement/{event_id}/trigger")
async def trigger_settlement(
    event_id: int,
    db: Session = Depends(get_db)
):
    """Trigger settlement calculation for an event."""
    event = get_event_or_404(event_id, db)
    try:
        result = settlement_service.calculate_settlement(event, db)
    except SettlementInputError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )

    return {"message": "Settlement calculated successfully", "settlement_id": result.id}


@router.get("/settlement/{event_id}/result", response_model=SettlementResultResponse)
async def get_settlement_result(
    event_id: int,
    db: Session = Depends(get_db)
):
    """Get settlement result for an event."""
    get_event_or_404(event_id, db)

    # Only the latest settlement is kept
    settlement = db.query(SettlementResult).filter(
        SettlementResult.event_id == event_id
    ).first()

    if not settlement:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Settlement result not found"
        )

    return settlement


@router.post(
    "/events/{event_id}/payment-request",
    response_model=PaymentRequestResponse,
    status_code=status.HTTP_202_ACCEPTED
)
async def request_payment(
    event_id: int,
    request: PaymentRequestCreate,
    db: Session = Depends(get_db)
):
    """Queue a payment request to a guest."""
    event = get_event_or_404(event_id, db)
    try:
        return settlement_service.create_payment_request(event, request, db)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
