import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import DATABASE_URL, DEBUG, LOG_LEVEL, env_str
from .database import init_db
from .routers.validation import router as validation_router


logging.basicConfig(
    level=getattr(logging, LOG_LEVEL, logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):

    # Startup
    init_db()
    print("Starting Idea Validator")
    print(f"   OpenAI Key:  {' Configured' if env_str('OPENAI_API_KEY') else ' Not set (stages will fail)'}")
    print(f"   Model:       {env_str('OPENAI_MODEL', 'gpt-4.1')}")
    print(f"   Database:    {DATABASE_URL}")
    print("   Ready to validate business ideas!")

    yield

    print("Shutting down Idea Validator")


app = FastAPI(
    title="Idea Validator",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)


app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:3000",      # Frontend dev server
        "http://127.0.0.1:3000",      # Alternative localhost
    ],
    allow_credentials=True,
    allow_methods=["*"],  # Allow all HTTP methods
    allow_headers=["*"],  # Allow all headers
)

app.include_router(validation_router)

@app.get(
    "/",
    summary="API Root",
    description="Welcome endpoint with API information",
    tags=["General"]
)
async def root():
    """Root endpoint with API information."""
    return {
        "name": "Idea Validator",
        "version": "0.1.0",
        "description": "AI-powered business idea validation: market snapshot, feature roadmap, sprint plan",
        "docs": "/docs",
        "endpoints": {
            "validate": "POST /api/validate-idea - Validate a business idea",
            "idea": "GET /api/ideas/{idea_id} - Fetch a stored idea record",
            "health": "GET /health - Service health check"
        }
    }


@app.get(
    "/health",
    summary="Global Health Check",
    description="Check if the API server is running",
    tags=["General"]
)
async def health():
    """Global health check endpoint."""
    return {
        "status": "healthy",
        "service": "idea-validator",
        "version": "0.1.0"
    }

@app.exception_handler(Exception)
async def global_exception_handler(request, exc):
    """Global exception handler for unhandled errors."""
    logger.exception("Unhandled error on %s", request.url.path)
    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "error": "Internal server error",
            "detail": str(exc) if DEBUG else "An unexpected error occurred"
        }
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=os.getenv("HOST", "127.0.0.1"),
        port=int(os.getenv("PORT", "8000")),
        reload=DEBUG,
    )
