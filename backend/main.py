import os
import traceback
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config import settings
from api.routes_split import router as split_api_router
from utils.logger import setup_logging, get_logger

# Setup logging
setup_logging(level=settings.LOG_LEVEL, json_format=settings.LOG_JSON)
logger = get_logger("main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events"""
    logger.info(
        "Starting Optimal Split Router...",
        order_book_levels=settings.SPLIT_ORDER_BOOK_LEVELS,
        lmsr_min_liquidity=settings.SPLIT_LMSR_MIN_LIQUIDITY,
        max_iterations=settings.SPLIT_BISECTION_MAX_ITERATIONS,
    )
    yield
    logger.info("Optimal Split Router stopped")


app = FastAPI(
    title="Optimal Split Router",
    description="Budget allocation across order book and LMSR prediction market venues",
    version="1.0.0",
    lifespan=lifespan,
)


# Global exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(
        "Unhandled exception",
        path=request.url.path,
        method=request.method,
        error=str(exc),
        traceback=traceback.format_exc(),
    )
    return JSONResponse(
        status_code=500, content={"detail": "Internal server error", "error": str(exc)}
    )


# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# API routes
app.include_router(split_api_router, prefix="/api")


@app.get("/health")
async def health_check():
    """Basic health check - for load balancers"""
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn

    port = int(os.environ.get("PORT", 8000))
    uvicorn.run(app, host="0.0.0.0", port=port, log_level=settings.LOG_LEVEL.lower())
