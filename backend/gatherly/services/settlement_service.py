"""
Settlement service for bill splitting and debt settlement.
"""
import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, List, Optional, Sequence, Tuple
from sqlalchemy.orm import Session
from gatherly.core.config import settings
from gatherly.models.event import Event, InvitationStatus
from gatherly.models.settlement import SettlementResult, PaymentRequest
from gatherly.schemas.settlement import (
    Participant, Transfer, BalanceRow, BillSplitResponse, PaymentRequestCreate
)

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")


class SettlementInputError(ValueError):
    """Raised when a ledger cannot be settled as supplied."""


def _check_unique(identities: Sequence[str]) -> None:
    seen = set()
    for identity in identities:
        if identity in seen:
            raise SettlementInputError(f"Duplicate participant identity: {identity!r}")
        seen.add(identity)


def compute_settlement(
    participants: Sequence[Participant],
    epsilon: Optional[Decimal] = None
) -> List[Transfer]:
    """
    Turn a ledger into pairwise transfers that zero every balance.

    Greedy matching: debtors are processed largest debt first, and each one
    pays creditors in order of largest credit first until the debt is
    cleared. Ties keep input order, so the output is deterministic. The
    transfer count is small in practice but not guaranteed minimal.

    Balances within ``epsilon`` of zero count as settled and produce no
    transfer. Input records are never mutated.
    """
    if epsilon is None:
        epsilon = settings.SETTLEMENT_EPSILON
    _check_unique([p.identity for p in participants])

    # Working copies: [identity, outstanding amount], both stored positive
    debtors = [[p.identity, -p.balance] for p in participants if p.balance < -epsilon]
    creditors = [[p.identity, p.balance] for p in participants if p.balance > epsilon]

    debtors.sort(key=lambda x: x[1], reverse=True)
    creditors.sort(key=lambda x: x[1], reverse=True)

    transfers = []
    for debtor_id, remaining in debtors:
        for creditor in creditors:
            if remaining <= epsilon:
                break
            if creditor[1] <= epsilon:
                continue

            amount = min(remaining, creditor[1])
            transfers.append(Transfer(from_identity=debtor_id, to_identity=creditor[0], amount=amount))
            logger.debug(f"Transfer {debtor_id} -> {creditor[0]}: {amount}")

            remaining -= amount
            creditor[1] -= amount

    return transfers


def apply_transfers(
    participants: Sequence[Participant],
    transfers: Sequence[Transfer]
) -> Dict[str, Decimal]:
    """Return each participant's balance after the transfers are paid."""
    balances = {p.identity: p.balance for p in participants}
    for transfer in transfers:
        balances[transfer.from_identity] = balances.get(transfer.from_identity, Decimal(0)) + transfer.amount
        balances[transfer.to_identity] = balances.get(transfer.to_identity, Decimal(0)) - transfer.amount
    return balances


def summarize_balances(
    participants: Sequence[Participant],
    contacts: Optional[Dict[str, str]] = None
) -> List[BalanceRow]:
    """Build the per-person paid / owes / balance table."""
    contacts = contacts or {}
    return [
        BalanceRow(
            person=p.identity,
            paid=p.paid,
            owes=p.owed,
            balance=p.balance,
            email_or_phone=contacts.get(p.identity)
        )
        for p in participants
    ]


def split_evenly(total: Decimal, identities: Sequence[str]) -> Dict[str, Decimal]:
    """
    Split ``total`` into equal shares of whole cents.

    Leftover cents go one each to the first identities, so the shares
    always add back up to the total.
    """
    if not identities:
        return {}
    _check_unique(identities)

    cents = int((total / CENT).to_integral_value(rounding=ROUND_HALF_UP))
    base, extra = divmod(cents, len(identities))
    return {
        identity: Decimal(base + (1 if index < extra else 0)) * CENT
        for index, identity in enumerate(identities)
    }


def build_ledger(event: Event) -> Tuple[List[Participant], Decimal]:
    """
    Build settlement participants from an event's needs and guests.

    Only costs somebody in the ledger has paid are shared: a need's cost
    counts when it is claimed by the host or by a guest who has not
    declined. The host and those guests split that total evenly, so the
    balances always sum to zero.

    Returns the participants and the cost of needs nobody in the ledger
    has paid for, which is left out of the split.
    """
    host_claims = {event.creator, event.host_name}
    guests = [i for i in event.invitees if i.invitation != InvitationStatus.REJECTED]

    paid: Dict[str, Decimal] = {event.host_name: Decimal(0)}
    for guest in guests:
        paid.setdefault(guest.name, Decimal(0))

    unattributed = Decimal(0)
    for need in event.needs:
        cost = need.cost or Decimal(0)
        if need.claimed_by in host_claims:
            paid[event.host_name] += cost
        elif need.claimed_by in paid:
            paid[need.claimed_by] += cost
        else:
            unattributed += cost

    identities = [event.host_name] + [g.name for g in guests]
    shares = split_evenly(sum(paid.values(), Decimal(0)), identities)

    participants = [
        Participant(identity=identity, paid=paid[identity], owed=shares[identity])
        for identity in identities
    ]
    return participants, unattributed


def calculate_bill_split(event: Event) -> BillSplitResponse:
    """Compute the bill split for an event without persisting anything."""
    participants, unattributed = build_ledger(event)
    transfers = compute_settlement(participants)

    residual = apply_transfers(participants, transfers)
    unsettled = {k: v for k, v in residual.items() if abs(v) > settings.SETTLEMENT_EPSILON}
    if unsettled:
        logger.warning(f"Event {event.id} left unsettled balances: {unsettled}")
    if unattributed:
        logger.info(f"Event {event.id} has {unattributed} in costs nobody has paid yet")

    contacts = {i.name: i.email_or_phone for i in event.invitees}
    return BillSplitResponse(
        event_id=event.id,
        currency=settings.CURRENCY,
        total_cost=sum((p.owed for p in participants), Decimal(0)),
        unattributed_cost=unattributed,
        rows=summarize_balances(participants, contacts),
        transfers=transfers
    )


def calculate_settlement(event: Event, db: Session) -> SettlementResult:
    """
    Calculate and store the settlement for an event.
    Replaces any earlier result for the same event.
    """
    bill_split = calculate_bill_split(event)
    currency = bill_split.currency

    # Amounts are stored as strings to keep them exact in JSON
    calculation_data = {
        "currency": currency,
        "total_cost": str(bill_split.total_cost),
        "unattributed_cost": str(bill_split.unattributed_cost),
        "participant_count": len(bill_split.rows),
        "balances": {row.person: str(row.balance) for row in bill_split.rows},
        "transfers": [
            {"from": t.from_identity, "to": t.to_identity, "amount": str(t.amount)}
            for t in bill_split.transfers
        ],
    }

    summary_lines = [
        f"Total cost: {bill_split.total_cost:.2f} {currency}",
        f"Unpaid needs: {bill_split.unattributed_cost:.2f} {currency}",
        f"Participants: {len(bill_split.rows)}",
        "\nBalances:",
    ]
    for row in bill_split.rows:
        summary_lines.append(f"  {row.person}: {row.balance:+.2f} {currency}")
    summary_lines.append("\nTransfers:")
    for transfer in bill_split.transfers:
        summary_lines.append(
            f"  {transfer.from_identity} -> {transfer.to_identity}: "
            f"{transfer.amount:.2f} {currency}"
        )
    summary = "\n".join(summary_lines)

    # Only the latest settlement is kept
    db.query(SettlementResult).filter(
        SettlementResult.event_id == event.id
    ).delete()

    settlement = SettlementResult(
        event_id=event.id,
        calculation_data=calculation_data,
        summary=summary
    )
    db.add(settlement)
    db.commit()
    db.refresh(settlement)

    logger.info(f"Settlement calculated for event {event.id}: {len(bill_split.transfers)} transfers")
    return settlement


def create_payment_request(
    event: Event,
    request: PaymentRequestCreate,
    db: Session
) -> PaymentRequest:
    """
    Record a request that a guest pay the host.
    Delivery by email or SMS is handled outside this service.
    """
    invitee = next((i for i in event.invitees if i.name == request.recipient), None)
    contact = request.recipient_contact or (invitee.email_or_phone if invitee else None)
    if not contact:
        raise ValueError(f"No contact on file for {request.recipient}")

    payment_request = PaymentRequest(
        event_id=event.id,
        recipient=request.recipient,
        recipient_contact=contact,
        amount=request.amount.quantize(CENT, rounding=ROUND_HALF_UP),
        requested_by=request.host_name or event.host_name
    )
    db.add(payment_request)
    db.commit()
    db.refresh(payment_request)

    logger.info(
        f"Payment request queued for event {event.id}: "
        f"{payment_request.recipient} owes {payment_request.amount} {settings.CURRENCY}"
    )
    return payment_request
