"""
Async route handlers called directly, without the HTTP stack.
"""
import pytest

from vidlinkgen.api.routes.auth import get_me, mark_channels_joined
from vidlinkgen.api.routes.pricing import list_plans, payment_instructions


@pytest.mark.asyncio
async def test_list_plans_default_currency():
    response = await list_plans(currency=None)

    assert response.currency == "USD"
    assert response.free_upload_limit == "200MB"
    assert [plan.key for plan in response.plans] == [
        "individual_monthly",
        "individual_yearly",
        "team_monthly",
        "team_yearly",
    ]
    assert response.plans[0].price_display == "$2/month"


@pytest.mark.asyncio
async def test_list_plans_requested_currency():
    response = await list_plans(currency="ghs")

    assert response.currency == "GHS"
    assert response.plans[2].price_display == "₵75/month"
    assert all(plan.currency == "GHS" for plan in response.plans)


@pytest.mark.asyncio
async def test_list_plans_unknown_currency_falls_back():
    response = await list_plans(currency="JPY")

    assert response.currency == "USD"
    assert response.plans[3].price == 50


@pytest.mark.asyncio
async def test_payment_instructions_mention_momo_number():
    response = await payment_instructions()

    assert response.momo_number in response.instructions
    assert response.support_email in response.instructions


@pytest.mark.asyncio
async def test_profile_for_free_user(free_user):
    profile = await get_me(current_user=free_user)

    assert profile.is_premium is False
    assert profile.is_admin is False
    assert profile.upload_limit == "200MB"


@pytest.mark.asyncio
async def test_profile_for_team_user(team_user):
    profile = await get_me(current_user=team_user)

    assert profile.is_premium is True
    assert profile.premium_tier == "team"
    assert profile.upload_limit == "2TB"


@pytest.mark.asyncio
async def test_profile_for_admin_has_no_ceiling(admin_user):
    profile = await get_me(current_user=admin_user)

    assert profile.is_admin is True
    assert profile.upload_limit_bytes is None
    assert profile.upload_limit is None


@pytest.mark.asyncio
async def test_channels_joined_is_recorded_once(db, free_user):
    first = await mark_channels_joined(current_user=free_user, db=db)
    second = await mark_channels_joined(current_user=free_user, db=db)

    assert first.has_joined_channels is True
    assert second.has_joined_channels is True
    db.refresh(free_user)
    assert free_user.has_joined_channels is True
