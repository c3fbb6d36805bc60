"""
API v1 router setup
Entities, availability and reservations. No authentication: callers are trusted services.
"""
from fastapi import APIRouter

from booking_core.api.v1 import availability, businesses, reservations
from booking_core.api.v1.users import owners_router, users_router

api_v1_router = APIRouter()

# ============================================================================
# ENTITIES
# ============================================================================
api_v1_router.include_router(users_router)
api_v1_router.include_router(owners_router)
api_v1_router.include_router(businesses.router)

# ============================================================================
# AVAILABILITY (rules + resolved slots)
# ============================================================================
api_v1_router.include_router(availability.router)

# ============================================================================
# RESERVATIONS
# ============================================================================
api_v1_router.include_router(reservations.router)


# ============================================================================
# ROOT ENDPOINT - API Info
# ============================================================================
@api_v1_router.get("/", tags=["Info"])
async def api_info():
    """API information and available endpoint groups."""
    return {
        "version": "1.0",
        "endpoints": {
            "users": "/api/v1/users",
            "owners": "/api/v1/owners",
            "businesses": "/api/v1/businesses",
            "availability": "/api/v1/businesses/{business_id}/availability",
            "reservations": "/api/v1/reservations",
        }
    }
