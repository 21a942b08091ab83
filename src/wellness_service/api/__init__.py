"""SIANI Wellness Service - HTTP API routers."""
from fastapi import APIRouter

from . import analytics, biometrics, care, daily, family, intake, mood, pulse, user, voice

api_router = APIRouter()
for _module in (mood, daily, care, family, voice, user, biometrics, pulse, analytics, intake):
    api_router.include_router(_module.router)

__all__ = ["api_router"]
