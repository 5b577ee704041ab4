"""
API v1 router setup
Organized into: public (slug or cancellation token) and dashboard (JWT) routes
"""
from fastapi import APIRouter

from app.api.v1.public import booking
from app.api.v1.dashboard import appointments, holidays, schedules

api_v1_router = APIRouter()

# ============================================================================
# PUBLIC ROUTES (No authentication required)
# ============================================================================
api_v1_router.include_router(
    booking.router,
    prefix="/public",
    tags=["Public"]
)

# ============================================================================
# DASHBOARD ROUTES (JWT authentication required)
# ============================================================================
api_v1_router.include_router(
    appointments.router,
    prefix="/dashboard",
    tags=["Dashboard"]
)

api_v1_router.include_router(
    holidays.router,
    prefix="/dashboard",
    tags=["Dashboard"]
)

api_v1_router.include_router(
    schedules.router,
    prefix="/dashboard",
    tags=["Dashboard"]
)


# ============================================================================
# ROOT ENDPOINT - API Info
# ============================================================================
@api_v1_router.get("/", tags=["Info"])
async def api_info():
    """API information and available endpoints."""
    return {
        "version": "1.0",
        "authentication": {
            "public": "No authentication required (business slug or cancellation token)",
            "dashboard": "JWT Bearer token with a business_id claim",
        }
    }
