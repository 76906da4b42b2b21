"""
CourseHub Admissions - Main Application

FastAPI backend with:
- Course application workflow (eligibility, quota, exclusivity, lifecycle)
- MongoDB (or in-memory) document store
- JWT bearer tokens for actor roles
- Status aggregation for dashboards

Run: uvicorn coursehub.main:app --reload
"""

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from coursehub.api.routes import api_router
from coursehub.core.config import get_settings
from coursehub.core.errors import AdmissionsError
from coursehub.core.logger import get_logger
from coursehub.services.store import get_store

settings = get_settings()
logger = get_logger(__name__)

# Create FastAPI app
app = FastAPI(
    title="CourseHub Admissions",
    description="""
    Student course applications to institutions.

    ## Features
    - **Applications**: submit, review, accept offers, withdraw
    - **Rules**: course eligibility, 2 active applications per institution,
      no new applications after accepting an admission
    - **Institutions & Courses**: catalog and admissions publishing
    - **Stats**: per-institution status counts, recomputed on every request
    """,
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

# CORS middleware (allow all for development)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routes
app.include_router(api_router, prefix="/api")


@app.exception_handler(AdmissionsError)
async def admissions_error_handler(request: Request, exc: AdmissionsError):
    """Workflow errors -> JSON body with detail, error code and (eligibility) reasons."""
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


# Startup event
@app.on_event("startup")
async def startup_event():
    """Initialize MongoDB indexes on startup."""
    if settings.store_backend != "mongo":
        logger.info("Using in-memory admissions store")
        return
    try:
        from coursehub.db.mongodb import init_mongo_indexes
        init_mongo_indexes()
        logger.info("MongoDB indexes initialized")
    except Exception as e:
        logger.warning("MongoDB index initialization failed: %s", e)


@app.get("/health", tags=["Health"])
async def health_check():
    """Detailed health check."""
    return {
        "status": "healthy",
        "store_backend": settings.store_backend,
        "store": "connected" if get_store().ping() else "disconnected"
    }
