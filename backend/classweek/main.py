from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from classweek.api.routes import health, reminders, schedule, sessions
from classweek.core.config import Settings, get_settings
from classweek.core.exceptions import AppError
from classweek.services.registry import TimetableRegistry
from classweek.services.reminders import ReminderPoller, ReminderSettingsStore

logger = logging.getLogger(__name__)


async def app_error_handler(request: Request, exc: AppError):
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.message, "details": exc.details},
    )


def create_app(settings: Settings | None = None, registry: TimetableRegistry | None = None) -> FastAPI:
    settings = settings or get_settings()
    logging.basicConfig(level=settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        poller = None
        if settings.reminder_poller_enabled:
            poller = ReminderPoller(
                app.state.registry.tick_all,
                interval_seconds=settings.reminder_poll_interval_seconds,
            )
            poller.start()
            logger.info("Reminder poller started (every %.0fs)", settings.reminder_poll_interval_seconds)
        app.state.reminder_poller = poller
        try:
            yield
        finally:
            if poller is not None:
                await poller.stop()
                logger.info("Reminder poller stopped")
            app.state.reminder_poller = None

    app = FastAPI(title=settings.project_name, lifespan=lifespan)
    app.state.registry = registry or TimetableRegistry(ReminderSettingsStore(settings.reminder_settings_path))
    app.state.reminder_poller = None
    app.add_exception_handler(AppError, app_error_handler)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    owner_prefix = f"{settings.api_prefix}/owners/{{owner_id}}"
    app.include_router(health.router, prefix=settings.api_prefix, tags=["health"])
    app.include_router(sessions.router, prefix=f"{owner_prefix}/sessions", tags=["sessions"])
    app.include_router(schedule.router, prefix=owner_prefix, tags=["schedule"])
    app.include_router(reminders.router, prefix=settings.api_prefix, tags=["reminders"])
    return app


app = create_app()
