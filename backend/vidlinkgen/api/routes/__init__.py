"""
API route modules.
"""
from vidlinkgen.api.routes import auth, links, viewer, analytics, pricing, support, admin

__all__ = ["auth", "links", "viewer", "analytics", "pricing", "support", "admin"]
