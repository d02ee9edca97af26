from fastapi import APIRouter

from app.modules.clearances.review_router import router as review_router
from app.modules.clearances.router import public_router as stats_router
from app.modules.clearances.router import router as clearance_router
from app.modules.system_settings.router import router as system_settings_router

api_router = APIRouter()

api_router.include_router(clearance_router, prefix="/clearance", tags=["Clearance"])

api_router.include_router(review_router, prefix="/reviews", tags=["Reviews"])

api_router.include_router(
    system_settings_router,
    prefix="/admin",
    tags=["Admin - System"],
)

api_router.include_router(stats_router, prefix="/stats", tags=["Statistics"])
