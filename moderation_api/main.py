from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
import logging
from contextlib import asynccontextmanager
from moderation_api.api import routes
from moderation_api.core.config import Settings, get_settings
from moderation_api.services.base.moderation_model import BaseModerationModel
from moderation_api.services.base.rate_limiter import BaseRateLimiter
from moderation_api.services.clients.gemini_client import GeminiModerationClient
from moderation_api.services.clients.redis_rate_limiter import SlidingWindowRateLimiter
from moderation_api.services.moderation_service import Moderator

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    settings = app.state.settings
    # Startup
    logger.info("🚀 Starting Content Moderation API...")
    logger.info(f"Model: {settings.GEMINI_MODEL}")
    logger.info(
        f"Rate limit: {settings.RATE_LIMIT_MAX_REQUESTS} requests / "
        f"{settings.RATE_LIMIT_WINDOW_SECONDS}s "
        f"({'fail-open' if settings.RATE_LIMIT_FAIL_OPEN else 'fail-closed'})"
    )
    if settings.EXPOSE_ERROR_DETAILS:
        logger.warning("⚠️ Error details are exposed in 500 responses")

    yield

    # Shutdown
    logger.info("🛑 Shutting down Content Moderation API...")
    await app.state.rate_limiter.close()
    await app.state.moderator.client.close()


async def http_error_handler(request: Request, exc: StarletteHTTPException):
    """Render framework HTTP errors (405, 404, ...) as {"error": ...}"""
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=exc.headers,
    )


async def unhandled_error_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled error on {request.url.path}: {exc}", exc_info=exc)
    return JSONResponse(status_code=500, content={"error": routes.SERVICE_UNAVAILABLE_ERROR})


def create_app(settings: Settings = None,
               rate_limiter: BaseRateLimiter = None,
               moderation_model: BaseModerationModel = None) -> FastAPI:
    """Build the application with its process-wide collaborators"""
    settings = settings or get_settings()
    logging.getLogger().setLevel(settings.LOG_LEVEL)

    if rate_limiter is None:
        rate_limiter = SlidingWindowRateLimiter.from_url(
            settings.REDIS_URL,
            max_requests=settings.RATE_LIMIT_MAX_REQUESTS,
            window_seconds=settings.RATE_LIMIT_WINDOW_SECONDS,
        )
    if moderation_model is None:
        moderation_model = GeminiModerationClient(api_key=settings.GEMINI_API_KEY)

    app = FastAPI(title="Content Moderation API", lifespan=lifespan)
    app.state.settings = settings
    app.state.rate_limiter = rate_limiter
    app.state.moderator = Moderator(moderation_model, model=settings.GEMINI_MODEL)

    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    app.include_router(routes.router)

    @app.get("/")
    async def root():
        return {"message": "Content Moderation API"}

    @app.get("/health")
    async def health_check():
        return {"status": "healthy", "service": "moderation"}

    return app


app = create_app()
