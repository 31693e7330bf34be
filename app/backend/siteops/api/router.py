"""Top-level API router."""

from fastapi import APIRouter

from siteops.api.routes.dashboards import router as dashboards_router
from siteops.api.routes.exports import router as exports_router
from siteops.api.routes.health import router as health_router
from siteops.api.routes.me import router as me_router

api_router = APIRouter()
api_router.include_router(health_router, tags=["health"])
api_router.include_router(me_router)
api_router.include_router(dashboards_router)
api_router.include_router(exports_router)
