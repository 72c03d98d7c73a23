"""
Support ticket schemas.
"""
from datetime import datetime
from typing import List
from uuid import UUID

from pydantic import BaseModel


class TicketCreateRequest(BaseModel):
    subject: str
    message: str


class TicketResponse(BaseModel):
    id: UUID
    user_id: UUID
    user_email: str
    subject: str
    message: str
    priority: str
    status: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class TicketList(BaseModel):
    total: int
    tickets: List[TicketResponse]
