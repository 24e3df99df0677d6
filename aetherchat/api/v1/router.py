"""
API v1 router setup
"""
from fastapi import APIRouter

from aetherchat.api.v1 import ai, appointments, availability, customer_products, settings

api_v1_router = APIRouter()

# ============================================================================
# SCHEDULING
# ============================================================================
api_v1_router.include_router(availability.router)
api_v1_router.include_router(appointments.router)
api_v1_router.include_router(customer_products.router)
api_v1_router.include_router(settings.router)

# ============================================================================
# AI
# ============================================================================
api_v1_router.include_router(ai.router)


@api_v1_router.get("/", tags=["Info"])
async def api_info():
    """API information and available endpoints"""
    return {
        "version": "1.0",
        "endpoints": {
            "availability": "/api/v1/availability",
            "appointments": "/api/v1/appointments",
            "customer_products": "/api/v1/customer-products",
            "settings": "/api/v1/settings",
            "ai": "/api/v1/ai",
        }
    }
