"""
SIANI Wellness Service.

Backend for the SIANI reentry wellness companion: mood and daily practice
tracking, voice coaching, care coordination, family collaboration,
biometrics, community pulse and analytics.

Architecture:
    - Domain Layer: services holding the wellness rules (mood, voice, care, ...)
    - Infrastructure Layer: repository, query cache, OpenAI and ElevenLabs clients
    - API Layer: FastAPI routers under ``wellness_service.api``

Usage:
    from wellness_service.main import create_app
    app = create_app()
"""
__version__ = "1.0.0"

from .config import WellnessServiceSettings

__all__ = ["WellnessServiceSettings", "__version__"]
