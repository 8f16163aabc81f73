# app/main.py
from dotenv import load_dotenv

load_dotenv()

import logging
import logging.config
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from config.appconfig import settings

# Apply logging configuration
logging.config.dictConfig(settings.LOGGING_CONFIG)

from app.database.connection import init_db
from app.draftsystem.draft_gateway import DraftGenerationGateway
from app.prescription_engine.errors import InvalidInputError, PrescriptionServiceError

# Import routers
from app.prescription_engine.routes import router as prescription_router
from app.system_services.system_routes import router as system_router

# Import configurations
from config.draftconfig import DraftSettings
from config.reset_config_route import router as reset_config_route

logger = logging.getLogger("app.main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    # Startup
    await init_db()
    draft_settings = DraftSettings()
    app.state.draft_gateway = DraftGenerationGateway(draft_settings)

    logger.info("===============================================================================")
    logger.info(f" 🚀 Starting {settings.APP_NAME}")
    logger.info(f" ✅ Database: {settings.DATABASE_URL.split('://')[0]}")
    logger.info(f" ✅ Draft Provider: {draft_settings.LLM_PROVIDER} - {draft_settings.candidate_models}")
    logger.info(f" ✅ Draft Timeout: {draft_settings.DRAFT_TIMEOUT_SECONDS}s")
    if draft_settings.LLM_PROVIDER == "mock":
        logger.warning(" ⚠️  Mock draft provider active - drafts are NOT real AI output")
    logger.info("===============================================================================")
    yield
    # Shutdown
    logger.info("👋 Shutting down")


app = FastAPI(
    title="Prescription Lifecycle Service",
    description="AI-assisted prescription drafting, doctor approval and version history",
    version="1.0.0",
    lifespan=lifespan,
)


@app.exception_handler(PrescriptionServiceError)
async def prescription_error_handler(request: Request, exc: PrescriptionServiceError):
    logger.warning(f"{request.method} {request.url.path} -> {exc.status_code} {exc.category}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload())


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    """Malformed request bodies and parameters share the typed validation envelope."""
    errors = exc.errors()
    message = "Invalid request"
    if errors:
        first = errors[0]
        field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{field}: {first.get('msg')}" if field else str(first.get("msg"))
    error = InvalidInputError(message)
    logger.warning(f"{request.method} {request.url.path} -> {error.status_code} {error.category}: {message}")
    return JSONResponse(status_code=error.status_code, content=error.to_payload())


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.error(f"❌ Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=exc)
    return JSONResponse(
        status_code=500,
        content={"status": "error", "message": "Something went wrong on the server"},
    )


# Include routers with prefixes
app.include_router(prescription_router, prefix="/api/prescriptions", tags=["Prescriptions"])
app.include_router(system_router, prefix="/api", tags=["Appointments"])
app.include_router(reset_config_route, prefix="/api/system")


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("app.main:app", host="0.0.0.0", port=8000, reload=True)
