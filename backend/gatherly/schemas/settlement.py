"""
Pydantic schemas for bill splitting and settlement.
"""
from pydantic import BaseModel, ConfigDict, Field
from typing import List, Dict, Any, Optional
from datetime import datetime
from decimal import Decimal


class Participant(BaseModel):
    """One party in an event's cost-sharing ledger."""
    model_config = ConfigDict(frozen=True)

    identity: str = Field(min_length=1)
    paid: Decimal = Field(ge=0)  # Already paid toward shared costs
    owed: Decimal = Field(ge=0)  # Fair share of the total cost

    @property
    def balance(self) -> Decimal:
        """Positive means owed money, negative means owes money."""
        return self.paid - self.owed


class Transfer(BaseModel):
    """A single directed payment instruction."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    from_identity: str = Field(alias="from")
    to_identity: str = Field(alias="to")
    amount: Decimal


class BalanceRow(BaseModel):
    """Per-person line of the bill-split table."""
    person: str
    paid: Decimal
    owes: Decimal
    balance: Decimal
    email_or_phone: Optional[str] = None


class BillSplitResponse(BaseModel):
    """Schema for an event's bill split."""
    event_id: int
    currency: str
    total_cost: Decimal  # Paid costs shared among participants
    unattributed_cost: Decimal = Decimal(0)  # Costs nobody in the ledger has paid
    rows: List[BalanceRow]
    transfers: List[Transfer]


class SettlementResultResponse(BaseModel):
    """Schema for settlement result response."""
    id: int
    event_id: int
    calculation_data: Dict[str, Any]
    summary: str
    created_at: datetime

    class Config:
        from_attributes = True


class PaymentRequestCreate(BaseModel):
    """Schema for asking a guest to pay their share."""
    recipient: str = Field(min_length=1)
    amount: Decimal = Field(gt=0)
    recipient_contact: Optional[str] = None  # Defaults to the invitee's contact on file
    host_name: Optional[str] = None


class PaymentRequestResponse(BaseModel):
    """Schema for payment request response."""
    id: int
    event_id: int
    recipient: str
    recipient_contact: str
    amount: Decimal
    requested_by: str
    created_at: datetime

    class Config:
        from_attributes = True
