from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from . import __version__
from .api import health, swap
from .config import settings
from .core.errors import SwapperError
from .logging_config import setup_logging
from .middleware import RequestLoggingMiddleware

setup_logging()

# Create FastAPI app
app = FastAPI(
    title="Metaswap API",
    description="Best-route swap and bridge quotes across DEX and bridge aggregators",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc"
)

app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(SwapperError)
async def swapper_error_handler(request: Request, exc: SwapperError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.to_dict()})


# Include routers
app.include_router(health.router, tags=["Health"])
app.include_router(swap.router, tags=["Swap"])


@app.get("/")
async def root():
    """Root endpoint with basic info"""
    return {
        "name": "Metaswap API",
        "version": __version__,
        "description": "Best-route swap and bridge quotes across DEX and bridge aggregators",
        "docs": "/docs",
        "health": "/healthz"
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "metaswap.main:app",
        host=settings.host,
        port=settings.port,
        reload=True,
        log_level=settings.log_level.lower()
    )
