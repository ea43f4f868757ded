"""FastAPI application factory for the contact intake service."""

from datetime import timedelta

from fastapi import FastAPI, Request, Response

from contactdesk.domain.intake import IntakeHandler
from contactdesk.domain.rate_limit import RateLimiter
from contactdesk.domain.spam import KeywordFilter
from contactdesk.infra.rate_limit_store import InMemoryRateLimitStore, RateLimitStore
from contactdesk.infra.settings import IntakeSettings, load_settings
from contactdesk.notifications.dispatcher import NotificationDispatcher
from contactdesk.observability.correlation import (
    CORRELATION_ID_HEADER,
    generate_correlation_id,
    reset_correlation_id,
    set_correlation_id,
)
from contactdesk.observability.logging import configure_logging

from .routers import public
from .routes import contact


def build_intake_handler(
    settings: IntakeSettings,
    *,
    store: RateLimitStore | None = None,
    dispatcher: NotificationDispatcher | None = None,
    rate_limiter: RateLimiter | None = None,
) -> IntakeHandler:
    """Wire the pipeline components from settings.

    Any component may be passed in to replace the default (tests, or a shared
    rate limit store for multi-instance deployments).
    """
    if rate_limiter is None:
        rate_limiter = RateLimiter(
            store if store is not None else InMemoryRateLimitStore(),
            max_count=settings.rate_limit_max,
            window=timedelta(seconds=settings.rate_limit_window_seconds),
        )
    return IntakeHandler(
        rate_limiter=rate_limiter,
        keyword_filter=KeywordFilter(settings.spam_keywords),
        dispatcher=dispatcher or NotificationDispatcher(settings),
    )


def create_app(
    settings: IntakeSettings | None = None,
    handler: IntakeHandler | None = None,
) -> FastAPI:
    """Create the FastAPI app.

    Args:
        settings: Explicit settings. If None, read from the environment.
        handler: Prebuilt pipeline. If None, built from settings with an
                 in-memory rate limit store owned by this app.
    """
    configure_logging()

    if settings is None:
        settings = load_settings()

    app = FastAPI(
        title="Contact Intake",
        docs_url=None,
        redoc_url=None,
    )
    app.state.settings = settings
    app.state.intake_handler = handler or build_intake_handler(settings)

    @app.middleware("http")
    async def correlation_id_middleware(request: Request, call_next) -> Response:
        cid = request.headers.get(CORRELATION_ID_HEADER) or generate_correlation_id()
        token = set_correlation_id(cid)
        try:
            response = await call_next(request)
            response.headers[CORRELATION_ID_HEADER] = cid
            return response
        finally:
            reset_correlation_id(token)

    app.include_router(public.router)
    app.include_router(contact.router)

    return app
