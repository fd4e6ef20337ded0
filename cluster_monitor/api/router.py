from fastapi import APIRouter

from cluster_monitor.api.v1 import monitoring
from cluster_monitor.config import settings

router = APIRouter()

router.include_router(monitoring.router, prefix=settings.API_PREFIX)


@router.get("/")
async def root():
    return {
        "message": settings.APP_NAME,
        "version": "1.0.0",
        "docs": "/docs",
        "monitoring": {
            "dashboard": f"{settings.API_PREFIX}/monitoring/dashboard",
            "health": f"{settings.API_PREFIX}/monitoring/health",
        }
    }


@router.get("/health")
async def health():
    return {"status": "healthy"}
