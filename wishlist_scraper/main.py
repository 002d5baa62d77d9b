"""
Wishlist Scraper - FastAPI Application
Main entry point with REST API endpoints.
"""
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware

from wishlist_scraper import __version__
from wishlist_scraper.config import config
from wishlist_scraper.errors import ScrapeError, UpstreamOther
from wishlist_scraper.routes.scrape import auth_layer, router as scrape_router
from wishlist_scraper.utils.logger import get_logger, set_trace_id


# Initialize FastAPI app
app = FastAPI(
    title="Wishlist Scraper",
    description="Extracts title, description, image and price from retailer product pages",
    version=__version__,
)

# CORS middleware (echoes the caller's origin so credentials are allowed)
app.add_middleware(
    CORSMiddleware,
    allow_origin_regex=config.CORS_ALLOW_ORIGIN_REGEX,
    allow_credentials=True,
    allow_methods=["GET", "OPTIONS"],
    allow_headers=["*"],
)

logger = get_logger("main")

if not auth_layer.is_configured():
    logger.warning(
        "auth_not_configured",
        message="Identity provider not configured; /api/scrape accepts unauthenticated requests",
        missing_variables=auth_layer.get_missing_settings()
    )


@app.middleware("http")
async def assign_trace_id(request: Request, call_next):
    """Give every request its own trace ID for log correlation."""
    set_trace_id()
    return await call_next(request)


@app.exception_handler(ScrapeError)
async def scrape_error_handler(request: Request, exc: ScrapeError):
    """Render taxonomy errors as `{"error": message}`."""
    logger.info(
        "scrape_error",
        error_type=type(exc).__name__,
        status_code=exc.status_code,
        path=request.url.path
    )
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    """Render anything outside the taxonomy as the generic scrape failure."""
    logger.error(
        "unhandled_error",
        error_type=type(exc).__name__,
        error=str(exc),
        path=request.url.path,
        exc_info=True
    )
    failure = UpstreamOther()
    return JSONResponse(status_code=failure.status_code, content={"error": failure.message})


# API Routes
@app.get("/api/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "version": __version__}


app.include_router(scrape_router, prefix="/api")


def run():
    """Start the local development server."""
    import uvicorn
    uvicorn.run(
        "wishlist_scraper.main:app",
        host=config.HOST,
        port=config.PORT,
        reload=config.DEBUG,
    )


if __name__ == "__main__":
    run()
