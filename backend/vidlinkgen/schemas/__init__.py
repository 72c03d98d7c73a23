"""
Pydantic schemas for API request/response validation.
"""
from vidlinkgen.schemas.link import (
    LinkCreateRequest,
    LinkUpdateRequest,
    LinkPermissionsRequest,
    LinkPermissionsResponse,
    LinkDetail,
    LinkList,
    UploadResponse,
)
from vidlinkgen.schemas.access import (
    LinkPreview,
    AccessRequest,
    AccessGrantResponse,
)
from vidlinkgen.schemas.analytics import (
    DailyClicks,
    CountBucket,
    TopLink,
    AnalyticsSummary,
    LinkAnalytics,
)
from vidlinkgen.schemas.admin import (
    AdminUserSummary,
    UserListResponse,
    AssignPremiumRequest,
    PlatformStats,
    TicketStatusUpdate,
)
from vidlinkgen.schemas.auth import (
    SignUpRequest,
    SignInRequest,
    SessionResponse,
    SignUpResponse,
    UserProfile,
)
from vidlinkgen.schemas.support import (
    TicketCreateRequest,
    TicketResponse,
    TicketList,
)
from vidlinkgen.schemas.pricing import (
    PlanResponse,
    PlansResponse,
    PaymentInstructions,
)

__all__ = [
    # Link
    "LinkCreateRequest",
    "LinkUpdateRequest",
    "LinkPermissionsRequest",
    "LinkPermissionsResponse",
    "LinkDetail",
    "LinkList",
    "UploadResponse",
    # Viewer
    "LinkPreview",
    "AccessRequest",
    "AccessGrantResponse",
    # Analytics
    "DailyClicks",
    "CountBucket",
    "TopLink",
    "AnalyticsSummary",
    "LinkAnalytics",
    # Admin
    "AdminUserSummary",
    "UserListResponse",
    "AssignPremiumRequest",
    "PlatformStats",
    "TicketStatusUpdate",
    # Auth
    "SignUpRequest",
    "SignInRequest",
    "SessionResponse",
    "SignUpResponse",
    "UserProfile",
    # Support
    "TicketCreateRequest",
    "TicketResponse",
    "TicketList",
    # Pricing
    "PlanResponse",
    "PlansResponse",
    "PaymentInstructions",
]
