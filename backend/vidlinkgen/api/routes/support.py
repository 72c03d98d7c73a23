"""
Support ticket endpoints for signed-in users.
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from vidlinkgen.core.auth import get_identity
from vidlinkgen.db.base import get_db
from vidlinkgen.schemas import TicketCreateRequest, TicketList, TicketResponse
from vidlinkgen.services.identity import IdentityContext
from vidlinkgen.services.support import SupportService

router = APIRouter()


@router.post("/tickets", response_model=TicketResponse, status_code=status.HTTP_201_CREATED)
async def create_ticket(
    payload: TicketCreateRequest,
    identity: IdentityContext = Depends(get_identity),
    db: Session = Depends(get_db),
):
    ticket = SupportService(db).create_ticket(identity, payload.subject, payload.message)
    return TicketResponse.model_validate(ticket)


@router.get("/tickets", response_model=TicketList)
async def list_my_tickets(
    identity: IdentityContext = Depends(get_identity),
    db: Session = Depends(get_db),
):
    tickets = SupportService(db).list_own(identity)
    return TicketList(total=len(tickets), tickets=[TicketResponse.model_validate(t) for t in tickets])
