import logging
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager

from otp_gate.core.config import settings
from otp_gate.core.exceptions import InfrastructureError, OtpGateError
from otp_gate.core.logging_config import setup_logging
from otp_gate.api.endpoints import auth, health

setup_logging(settings.LOG_LEVEL, settings.JSON_LOGS, service_name=settings.PROJECT_NAME)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for startup and shutdown events.
    """
    logger.info(f"Starting up OTP Gate API (store backend: {settings.OTP_STORE_BACKEND})...")

    yield

    logger.info("Shutting down OTP Gate API...")


app = FastAPI(
    title=settings.PROJECT_NAME,
    version="1.0.0",
    description="Email OTP issuance, rate limiting and verification API",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.BACKEND_CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(OtpGateError)
async def otp_gate_error_handler(request: Request, exc: OtpGateError):
    """Render expected OTP outcomes (locks, wrong codes, bad payloads)"""
    logger.info(
        f"{request.url.path}: {exc.error_code} - {exc.message}",
        extra={"error_code": exc.error_code, "status_code": exc.status_code, "path": request.url.path}
    )
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(InfrastructureError)
async def infrastructure_error_handler(request: Request, exc: InfrastructureError):
    """Store or mail transport failure; safe to retry"""
    logger.error(
        f"{request.url.path}: {exc.error_code} - {exc}",
        extra={"error_code": exc.error_code, "status_code": exc.status_code, "path": request.url.path}
    )
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error": exc.error_code, "message": exc.public_message}
    )


app.include_router(health.router)
app.include_router(auth.router, prefix=settings.API_V1_STR)


@app.get("/")
async def root():
    """Root endpoint - API health check"""
    return {
        "message": "OTP Gate API",
        "version": "1.0.0",
        "status": "healthy"
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level="info"
    )
