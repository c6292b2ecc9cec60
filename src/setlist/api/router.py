"""Routers that aggregate all route modules."""

from fastapi import APIRouter

from setlist.api import auth, bands, health, pages

# JSON API, mounted under /api
api_router = APIRouter()
api_router.include_router(bands.router, prefix="/bands", tags=["bands"])

# Auth flow, health probes and browser pages, mounted at the root
site_router = APIRouter()
site_router.include_router(pages.router, tags=["pages"])
site_router.include_router(auth.router, prefix="/auth", tags=["auth"])
site_router.include_router(health.router, prefix="/health", tags=["health"])
