"""
Premium plan configuration for VidLinkGen.

Plans are a closed set of tier x cadence combinations. Payment is never
collected by the service: users follow the manual payment instructions and an
admin assigns the plan afterwards (see ``vidlinkgen.services.entitlement``).
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple, Union

from vidlinkgen.core.config import settings


class Tier(str, Enum):
    INDIVIDUAL = "individual"
    TEAM = "team"


class Cadence(str, Enum):
    MONTHLY = "monthly"
    YEARLY = "yearly"


class PlanKey(str, Enum):
    INDIVIDUAL_MONTHLY = "individual_monthly"
    INDIVIDUAL_YEARLY = "individual_yearly"
    TEAM_MONTHLY = "team_monthly"
    TEAM_YEARLY = "team_yearly"


@dataclass(frozen=True)
class Price:
    amount: int
    display: str


@dataclass(frozen=True)
class Plan:
    key: PlanKey
    tier: Tier
    cadence: Cadence
    label: str
    duration_months: int
    upload_limit_bytes: int
    prices: Dict[str, Price] = field(default_factory=dict)
    features: Tuple[str, ...] = ()


MB = 1024 * 1024
GB = 1024 * MB
TB = 1024 * GB

# =============================================================================
# Upload ceilings
# =============================================================================

FREE_UPLOAD_LIMIT = 200 * MB

UPLOAD_LIMITS: Dict[Tier, int] = {
    Tier.INDIVIDUAL: 100 * GB,
    Tier.TEAM: 2 * TB,
}

CURRENCIES: Dict[str, Dict[str, str]] = {
    "USD": {"symbol": "$", "name": "US Dollar"},
    "GHS": {"symbol": "₵", "name": "Ghanaian Cedi"},
    "EUR": {"symbol": "€", "name": "Euro"},
    "GBP": {"symbol": "£", "name": "British Pound"},
    "NGN": {"symbol": "₦", "name": "Nigerian Naira"},
}

_INDIVIDUAL_FEATURES = (
    "100GB Upload Limit",
    "Password Protection",
    "File Encryption",
    "Advanced Access Control",
    "No Ads",
    "Detailed Analytics",
    "24/7 Priority Support",
)

_TEAM_FEATURES = (
    "2TB Upload Limit",
    "Team Collaboration Features",
    "Password Protection",
    "File Encryption",
    "Advanced Access Control",
    "No Ads",
    "Detailed Analytics",
    "Bulk Operations",
    "24/7 Priority Support",
)

# =============================================================================
# Plans
# =============================================================================

PLANS: Dict[PlanKey, Plan] = {
    PlanKey.INDIVIDUAL_MONTHLY: Plan(
        key=PlanKey.INDIVIDUAL_MONTHLY,
        tier=Tier.INDIVIDUAL,
        cadence=Cadence.MONTHLY,
        label="Individual Monthly",
        duration_months=1,
        upload_limit_bytes=UPLOAD_LIMITS[Tier.INDIVIDUAL],
        prices={
            "USD": Price(2, "$2/month"),
            "GHS": Price(30, "₵30/month"),
            "EUR": Price(2, "€2/month"),
            "GBP": Price(2, "£2/month"),
            "NGN": Price(3000, "₦3,000/month"),
        },
        features=_INDIVIDUAL_FEATURES,
    ),
    PlanKey.INDIVIDUAL_YEARLY: Plan(
        key=PlanKey.INDIVIDUAL_YEARLY,
        tier=Tier.INDIVIDUAL,
        cadence=Cadence.YEARLY,
        label="Individual Yearly",
        duration_months=12,
        upload_limit_bytes=UPLOAD_LIMITS[Tier.INDIVIDUAL],
        prices={
            "USD": Price(20, "$20/year (Save $4)"),
            "GHS": Price(300, "₵300/year (Save ₵60)"),
            "EUR": Price(20, "€20/year (Save €4)"),
            "GBP": Price(20, "£20/year (Save £4)"),
            "NGN": Price(30000, "₦30,000/year (Save ₦6,000)"),
        },
        features=_INDIVIDUAL_FEATURES,
    ),
    PlanKey.TEAM_MONTHLY: Plan(
        key=PlanKey.TEAM_MONTHLY,
        tier=Tier.TEAM,
        cadence=Cadence.MONTHLY,
        label="Team Monthly",
        duration_months=1,
        upload_limit_bytes=UPLOAD_LIMITS[Tier.TEAM],
        prices={
            "USD": Price(5, "$5/month"),
            "GHS": Price(75, "₵75/month"),
            "EUR": Price(5, "€5/month"),
            "GBP": Price(5, "£5/month"),
            "NGN": Price(7500, "₦7,500/month"),
        },
        features=_TEAM_FEATURES,
    ),
    PlanKey.TEAM_YEARLY: Plan(
        key=PlanKey.TEAM_YEARLY,
        tier=Tier.TEAM,
        cadence=Cadence.YEARLY,
        label="Team Yearly",
        duration_months=12,
        upload_limit_bytes=UPLOAD_LIMITS[Tier.TEAM],
        prices={
            "USD": Price(50, "$50/year (Save $10)"),
            "GHS": Price(750, "₵750/year (Save ₵150)"),
            "EUR": Price(50, "€50/year (Save €10)"),
            "GBP": Price(50, "£50/year (Save £10)"),
            "NGN": Price(75000, "₦75,000/year (Save ₦15,000)"),
        },
        features=_TEAM_FEATURES,
    ),
}


def get_plan(key: Union[str, PlanKey]) -> Plan:
    """
    Get the plan for a plan key.

    Args:
        key: Plan key (e.g. "individual_monthly")

    Returns:
        Plan record

    Raises:
        ValueError: If the key is not a known plan
    """
    try:
        return PLANS[PlanKey(key)]
    except ValueError:
        raise ValueError(f"Invalid plan: {key}. Must be one of: {[k.value for k in PlanKey]}") from None


def find_plan_for_tier(tier_name: Optional[str]) -> Optional[Plan]:
    """
    Find a plan for a stored tier name, preferring the monthly cadence.

    Returns None when no plan maps to the tier.
    """
    try:
        tier = Tier(tier_name)
    except ValueError:
        return None

    for cadence in (Cadence.MONTHLY, Cadence.YEARLY):
        for plan in PLANS.values():
            if plan.tier == tier and plan.cadence == cadence:
                return plan
    return None


def get_upload_limit(tier_name: Optional[str]) -> int:
    """
    Get the upload ceiling in bytes for a tier name; unknown or missing tiers get the free limit.
    """
    try:
        return UPLOAD_LIMITS[Tier(tier_name)]
    except ValueError:
        return FREE_UPLOAD_LIMIT


def format_size_limit(limit_bytes: int) -> str:
    """
    Human-readable ceiling: whole TB when at least 1TB, whole GB from 1GB, MB otherwise.
    """
    if limit_bytes >= TB:
        return f"{limit_bytes // TB}TB"
    if limit_bytes >= GB:
        return f"{limit_bytes // GB}GB"
    return f"{limit_bytes // MB}MB"


def resolve_currency(plan: Plan, currency: Optional[str] = None) -> str:
    """Currency code a plan is priced in for a request, falling back to the default currency."""
    target = (currency or settings.default_currency).upper()
    return target if target in plan.prices else settings.default_currency


def get_price(plan: Plan, currency: Optional[str] = None) -> Price:
    """
    Get a plan's price in a currency, falling back to the default currency.
    """
    return plan.prices[resolve_currency(plan, currency)]


def get_all_plans(currency: Optional[str] = None) -> List[Dict]:
    """
    Get all plans with their price in the requested currency.

    Returns:
        List of plan dictionaries ready for serialization
    """
    plans = []
    for plan in PLANS.values():
        price = get_price(plan, currency)
        plans.append({
            "key": plan.key.value,
            "tier": plan.tier.value,
            "cadence": plan.cadence.value,
            "label": plan.label,
            "duration_months": plan.duration_months,
            "upload_limit_bytes": plan.upload_limit_bytes,
            "upload_limit": format_size_limit(plan.upload_limit_bytes),
            "currency": resolve_currency(plan, currency),
            "price": price.amount,
            "price_display": price.display,
            "features": list(plan.features),
        })
    return plans
