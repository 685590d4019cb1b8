"""API routers."""

from __future__ import annotations

from fastapi import APIRouter

from .documents import router as documents_router
from .reports import router as reports_router

api_router = APIRouter()

api_router.include_router(documents_router)
api_router.include_router(reports_router)


@api_router.get("/status", tags=["monitoring"], summary="API status endpoint")
async def status() -> dict[str, str]:
    return {"status": "ok"}


__all__ = ["api_router"]
