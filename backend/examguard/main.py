from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text

from examguard.core.config import settings
from examguard.core.database import create_db_and_tables, SessionLocal
from examguard.api.v1.api import api_router
from examguard.middleware.timezone import TimezoneMiddleware

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting examguard API...")
    create_db_and_tables()
    logger.info("Database initialized")
    yield
    logger.info("examguard API shutdown completed")


app = FastAPI(
    title="examguard API",
    description="Proctoring violation ledger for timed exam sessions",
    version="1.0.0",
    docs_url="/docs" if settings.environment == "development" else None,
    redoc_url="/redoc" if settings.environment == "development" else None,
    lifespan=lifespan
)

app.add_middleware(TimezoneMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Global exception: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "data": None,
            "error": "Internal server error"
        }
    )


app.include_router(api_router, prefix="/api/v1")


@app.get("/health")
def health_check():
    health_status = {
        "status": "healthy",
        "version": "1.0.0",
        "services": {}
    }

    db = SessionLocal()
    try:
        db.execute(text("SELECT 1"))
        health_status["services"]["database"] = "healthy"
    except Exception as e:
        logger.error(f"Database health check failed: {e}")
        health_status["services"]["database"] = "unhealthy"
        health_status["status"] = "unhealthy"
    finally:
        db.close()

    return health_status
