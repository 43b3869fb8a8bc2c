"""
Settlement models: stored bill-split results and payment requests.
"""
from sqlalchemy import Column, String, Text, ForeignKey, Integer, Numeric, JSON
from sqlalchemy.orm import relationship
from gatherly.db.base import BaseModel


class SettlementResult(BaseModel):
    """Settlement result model storing calculation results."""
    __tablename__ = "settlement_results"

    event_id = Column(Integer, ForeignKey("events.id"), nullable=False, index=True)
    calculation_data = Column(JSON, nullable=False)  # Stores balances, transfers, totals
    summary = Column(Text, nullable=True)

    # Relationships
    event = relationship("Event", back_populates="settlement_results")


class PaymentRequest(BaseModel):
    """A host's request that a guest pay their share, queued for delivery."""
    __tablename__ = "payment_requests"

    event_id = Column(Integer, ForeignKey("events.id"), nullable=False, index=True)
    recipient = Column(String(100), nullable=False)
    recipient_contact = Column(String(255), nullable=False)
    amount = Column(Numeric(15, 2), nullable=False)
    requested_by = Column(String(100), nullable=False)

    event = relationship("Event", back_populates="payment_requests")
