import logging
import logging.config

from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from slugscan.config import Settings, get_settings
from slugscan.models.config_status import ConfigStatus
from slugscan.ratelimit import limiter
from slugscan.routers.duplicates import router as duplicates_router
from slugscan.routers.management import router as management_router
from slugscan.routers.search import router as search_router

logging.config.dictConfig(
    {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "json": {
                "format": '{"time": "%(asctime)s", "level": "%(levelname)s", "logger": "%(name)s", "message": "%(message)s"}',
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "json",
            },
        },
        "root": {"level": "INFO", "handlers": ["console"]},
    }
)

logger = logging.getLogger(__name__)

app = FastAPI(
    title="Slugscan – Duplicate Slug Finder",
    description=(
        "Scans the page items of a Kontent.ai project across languages and reports "
        "slugs that more than one content item publishes under."
    ),
    version="1.0.0",
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled exception for %s", request.url)
    return JSONResponse(status_code=500, content={"detail": "An unexpected error occurred."})


app.include_router(duplicates_router)
app.include_router(search_router)
app.include_router(management_router)


@app.get("/", summary="Health check")
async def root() -> dict:
    return {"message": "Hello from Slugscan"}


@app.get("/config", response_model=ConfigStatus, summary="Show which settings are present")
async def config_status(settings: Settings = Depends(get_settings)) -> ConfigStatus:
    return ConfigStatus(
        project_id=settings.project_id,
        delivery_api_key=bool(settings.delivery_api_key),
        management_api_key=bool(settings.management_api_key),
        languages=settings.languages,
    )
