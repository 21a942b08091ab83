"""
SIANI Wellness Service - FastAPI Application Entry Point.

Mood tracking, daily practice, voice coaching, care coordination, family
involvement, biometrics, community pulse, analytics and reentry intake
behind one JSON API.

Startup order:
- Configuration and logging
- Database engine, tables and reference data
- Repository, query cache and external clients
- Domain services
"""
from __future__ import annotations

import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any
from uuid import uuid4

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError as SettingsValidationError
import structlog

from siani_common.exceptions import GENERIC_USER_MESSAGE, SianiError
from siani_common.logging import bind_request_context, configure_logging
from siani_infrastructure.database import DatabaseManager, SeedDataLoader
from .api import api_router
from .config import CORSConfig, WellnessServiceSettings
from .domain import (
    AnalyticsService,
    BiometricService,
    CareService,
    DailyPracticeService,
    FamilyService,
    GoalIntakeService,
    IntakeService,
    MoodService,
    PreferencesService,
    PulseService,
    VoiceService,
)
from .infrastructure import ElevenLabsClient, OpenAIChatClient, QueryCache, WellnessRepository

logger = structlog.get_logger(__name__)

SERVICE_NAME = "wellness-service"
SERVICE_VERSION = "1.0.0"


class ServiceState:
    """Container for service dependencies."""

    def __init__(self) -> None:
        # Configuration
        self.settings: WellnessServiceSettings | None = None

        # Infrastructure
        self.database: DatabaseManager | None = None
        self.repository: WellnessRepository | None = None
        self.query_cache: QueryCache | None = None
        self.openai_client: OpenAIChatClient | None = None
        self.elevenlabs_client: ElevenLabsClient | None = None

        # Domain services
        self.mood_service: MoodService | None = None
        self.daily_service: DailyPracticeService | None = None
        self.care_service: CareService | None = None
        self.family_service: FamilyService | None = None
        self.voice_service: VoiceService | None = None
        self.preferences_service: PreferencesService | None = None
        self.biometric_service: BiometricService | None = None
        self.pulse_service: PulseService | None = None
        self.analytics_service: AnalyticsService | None = None
        self.intake_service: IntakeService | None = None
        self.goal_intake_service: GoalIntakeService | None = None

        # State tracking
        self.initialized: bool = False
        self.start_time: datetime = datetime.now(timezone.utc)
        self._stats: dict[str, int] = {
            "mood_entries": 0,
            "voice_requests": 0,
            "appointments_changed": 0,
            "biometric_entries": 0,
        }

    @property
    def stats(self) -> dict[str, Any]:
        """Get service statistics."""
        services = {
            "mood": self.mood_service,
            "care": self.care_service,
            "family": self.family_service,
            "voice": self.voice_service,
            "biometrics": self.biometric_service,
            "pulse": self.pulse_service,
            "analytics": self.analytics_service,
            "intake": self.intake_service,
            "goal_intake": self.goal_intake_service,
        }
        service_stats = {name: service.stats for name, service in services.items() if service}
        if self.query_cache:
            service_stats["cache"] = self.query_cache.get_statistics()
        if self.database:
            service_stats["database"] = self.database.get_statistics()
        return {
            **self._stats,
            **service_stats,
            "uptime_seconds": (datetime.now(timezone.utc) - self.start_time).total_seconds(),
        }

    def increment_stat(self, stat: str) -> None:
        """Increment a statistic counter."""
        if stat in self._stats:
            self._stats[stat] += 1


# Module-level state for test access
_state: ServiceState | None = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build every dependency on startup and release connections on shutdown."""
    global _state

    # --- 1. Configuration ---
    settings = WellnessServiceSettings.load()
    configure_logging(settings.service.log_level, settings.service.env)
    logger.info("wellness_service_starting", env=settings.service.env)

    # --- 2. Database ---
    database = DatabaseManager(
        settings.database.url,
        pool_size=settings.database.pool_size,
        max_overflow=settings.database.max_overflow,
        pool_timeout=settings.database.pool_timeout,
        echo=settings.database.echo,
    )
    await database.initialize()
    if settings.service.seed_on_startup:
        results = await SeedDataLoader(database).seed_all()
        logger.info("reference_data_seeded", created=sum(r.records_created for r in results))

    # --- 3. Infrastructure ---
    repository = WellnessRepository(database)
    query_cache = QueryCache(
        ttl_seconds=settings.cache.ttl_seconds,
        max_entries=settings.cache.max_entries,
        enabled=settings.cache.enabled,
    )
    openai_client = OpenAIChatClient(settings.openai)
    elevenlabs_client = ElevenLabsClient(settings.elevenlabs)

    # --- 4. Domain services ---
    state = ServiceState()
    state.settings = settings
    state.database = database
    state.repository = repository
    state.query_cache = query_cache
    state.openai_client = openai_client
    state.elevenlabs_client = elevenlabs_client

    state.mood_service = MoodService(repository, openai_client, query_cache)
    state.daily_service = DailyPracticeService(repository, query_cache)
    state.care_service = CareService(repository, query_cache)
    state.family_service = FamilyService(repository)
    state.voice_service = VoiceService(repository, openai_client, elevenlabs_client, state.mood_service)
    state.preferences_service = PreferencesService(repository)
    state.biometric_service = BiometricService(repository, openai_client)
    state.pulse_service = PulseService(repository)
    state.analytics_service = AnalyticsService(repository)
    state.intake_service = IntakeService(repository)
    state.goal_intake_service = GoalIntakeService(openai_client)
    state.initialized = True

    app.state.service = state
    _state = state

    logger.info(
        "wellness_service_initialized",
        database=database.dialect,
        openai_enabled=openai_client.enabled,
        elevenlabs_enabled=elevenlabs_client.enabled,
        cache_enabled=query_cache.enabled,
    )

    yield

    # --- Cleanup ---
    logger.info("wellness_service_shutting_down", stats=state.stats)
    await openai_client.close()
    await elevenlabs_client.close()
    await database.close()
    state.initialized = False
    _state = None


def _validation_fields(exc: RequestValidationError) -> list[dict[str, Any]]:
    fields = []
    for error in exc.errors():
        loc = [str(part) for part in error["loc"] if part not in ("body", "query", "path", "header")]
        fields.append({"field": ".".join(loc), "message": error["msg"], "type": error["type"]})
    return fields


def create_app() -> FastAPI:
    """Create and configure FastAPI application."""
    try:
        cors_config = WellnessServiceSettings().service.cors
    except SettingsValidationError:
        # Settings are validated again in lifespan; CORS falls back to localhost
        cors_config = CORSConfig()

    app = FastAPI(
        title="SIANI Wellness Service",
        description="Wellness and reentry support: mood, voice coaching, care team, family and biometrics",
        version=SERVICE_VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_config.get_allowed_origins(),
        allow_credentials=cors_config.allow_credentials,
        allow_methods=cors_config.get_allowed_methods(),
        allow_headers=cors_config.get_allowed_headers(),
        expose_headers=["X-Request-ID", "X-Process-Time-Ms"],
    )

    @app.middleware("http")
    async def request_tracking_middleware(request: Request, call_next):
        request_id = request.headers.get("X-Request-ID", str(uuid4()))
        bind_request_context(request_id=request_id, method=request.method, path=request.url.path)
        start_time = time.perf_counter()
        response = await call_next(request)
        process_time_ms = (time.perf_counter() - start_time) * 1000
        response.headers["X-Request-ID"] = request_id
        response.headers["X-Process-Time-Ms"] = f"{process_time_ms:.2f}"
        if request.url.path.startswith("/api"):
            logger.info("request_completed", status_code=response.status_code,
                        process_time_ms=round(process_time_ms, 2))
        return response

    # Exception handlers
    @app.exception_handler(SianiError)
    async def siani_error_handler(request: Request, exc: SianiError) -> JSONResponse:
        """Domain and infrastructure errors carry their own status and payload."""
        return JSONResponse(status_code=exc.http_status, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        fields = _validation_fields(exc)
        logger.warning("request_validation_failed", path=request.url.path, fields=fields)
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": {
                "code": "VALIDATION_ERROR",
                "message": "Invalid request data",
                "fields": fields,
            }},
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Handle unexpected errors."""
        logger.error("unhandled_exception", error=str(exc), exc_type=type(exc).__name__,
                     path=request.url.path)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": {"code": "INTERNAL_ERROR", "message": GENERIC_USER_MESSAGE}},
        )

    # Health endpoints
    @app.get("/health", tags=["Health"])
    async def health_check() -> dict[str, str]:
        """Liveness check."""
        return {"status": "healthy", "service": SERVICE_NAME}

    @app.get("/ready", tags=["Health"])
    async def readiness_check(request: Request) -> Any:
        """Readiness check; also pings the database."""
        state: ServiceState | None = getattr(request.app.state, "service", None)
        if state is None or not state.initialized:
            return JSONResponse(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                content={"status": "not_ready", "reason": "Service not initialized"},
            )
        database = await state.database.health_check()
        if database["status"] != "healthy":
            return JSONResponse(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                content={"status": "not_ready", "reason": "Database unavailable", "database": database},
            )
        return {"status": "ready", "service": SERVICE_NAME, "initialized": state.initialized}

    @app.get("/status", tags=["Health"])
    async def service_status(request: Request) -> dict[str, Any]:
        """Get service status and statistics."""
        state: ServiceState = request.app.state.service
        return {
            "status": "operational" if state.initialized else "initializing",
            "service": SERVICE_NAME,
            "version": SERVICE_VERSION,
            "statistics": state.stats,
            "settings": {
                "env": state.settings.service.env if state.settings else None,
                "openai_enabled": state.settings.openai.enabled if state.settings else None,
                "elevenlabs_enabled": state.settings.elevenlabs.enabled if state.settings else None,
            },
        }

    app.include_router(api_router, prefix="/api")

    return app


app = create_app()


def run() -> None:
    import uvicorn

    settings = WellnessServiceSettings()
    uvicorn.run(
        "wellness_service.main:app",
        host=settings.service.host,
        port=settings.service.port,
        reload=settings.service.is_development(),
        log_level=settings.service.log_level.lower(),
    )


if __name__ == "__main__":
    run()
