"""
Pricing endpoints.

Payment is never processed here: users pay manually and an admin activates
premium afterwards.
"""
from typing import Optional

from fastapi import APIRouter, Query

from vidlinkgen.core.config import settings
from vidlinkgen.core.pricing import CURRENCIES, FREE_UPLOAD_LIMIT, format_size_limit, get_all_plans
from vidlinkgen.schemas import PaymentInstructions, PlanResponse, PlansResponse

router = APIRouter()


@router.get("/plans", response_model=PlansResponse)
async def list_plans(currency: Optional[str] = Query(None, description="ISO currency code, e.g. GHS")):
    """
    List premium plans priced in the requested currency.

    Unknown currencies fall back to the default currency.
    """
    requested = (currency or settings.default_currency).upper()
    resolved = requested if requested in CURRENCIES else settings.default_currency
    return PlansResponse(
        currency=resolved,
        currencies=CURRENCIES,
        free_upload_limit=format_size_limit(FREE_UPLOAD_LIMIT),
        plans=[PlanResponse(**plan) for plan in get_all_plans(resolved)],
    )


@router.get("/payment-instructions", response_model=PaymentInstructions)
async def payment_instructions():
    return PaymentInstructions(
        momo_number=settings.momo_number,
        support_email=settings.support_email,
        whatsapp_channels=settings.whatsapp_channels,
        telegram_handles=settings.telegram_handles,
        instructions=(
            f"Send the plan amount to mobile money number {settings.momo_number} and "
            f"email the transaction reference to {settings.support_email}. "
            "Your premium plan is activated once the payment is confirmed."
        ),
    )
