"""
Pricing and payment-instruction schemas.
"""
from typing import Dict, List

from pydantic import BaseModel


class PlanResponse(BaseModel):
    key: str
    tier: str
    cadence: str
    label: str
    duration_months: int
    upload_limit_bytes: int
    upload_limit: str
    currency: str
    price: int
    price_display: str
    features: List[str]


class PlansResponse(BaseModel):
    currency: str
    currencies: Dict[str, Dict[str, str]]
    free_upload_limit: str
    plans: List[PlanResponse]


class PaymentInstructions(BaseModel):
    """Manual payment details; an admin activates premium once payment is confirmed."""

    momo_number: str
    support_email: str
    whatsapp_channels: List[str]
    telegram_handles: List[str]
    instructions: str
