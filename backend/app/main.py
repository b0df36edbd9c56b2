# app/main.py
import logging
import os

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.core.config import settings
from app.core.errors import BookingError, UnexpectedError
from app.core.logging_context import REQUEST_ID_HEADER, set_request_id

#Import Routers
from app.api.v1 import appointments
from app.api.v1 import availability
from app.api.v1 import booking
from app.api.v1 import onboarding

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title="Agenda Booking API",
    description="Availability and booking core for appointment-based businesses",
    version="1.0.0"
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Restrict in production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def request_id_middleware(request: Request, call_next):
    request_id = set_request_id(request.headers.get(REQUEST_ID_HEADER))
    try:
        response = await call_next(request)
    except Exception:
        # Rendered here so the 500 still carries the request id
        response = _unexpected_error_response(request)
    response.headers[REQUEST_ID_HEADER] = request_id
    return response


@app.exception_handler(BookingError)
async def booking_error_handler(request: Request, exc: BookingError):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    first = exc.errors()[0] if exc.errors() else {}
    location = ".".join(
        str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path")
    )
    message = first.get("msg", "Invalid request")
    logger.warning(f"Validation error for {request.url.path}: {exc.errors()}")
    return JSONResponse(
        status_code=400,
        content={"error": f"{location}: {message}" if location else message},
    )


def _unexpected_error_response(request: Request) -> JSONResponse:
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    fallback = UnexpectedError()
    return JSONResponse(status_code=fallback.status_code, content={"error": fallback.message})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    return _unexpected_error_response(request)


#Include routers
app.include_router(booking.router, prefix="/api")
app.include_router(availability.router, prefix="/api/businesses", tags=["availability"])
app.include_router(appointments.router, prefix="/api/businesses")
app.include_router(onboarding.router, prefix="/api/onboarding", tags=["onboarding"])


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "message": "Agenda Booking API",
        "version": "1.0.0",
        "status": "running"
    }

@app.get("/health")
async def health():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "environment": settings.app_env
    }

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app.main:app",
        host=os.getenv("API_HOST", "0.0.0.0"),
        port=int(os.getenv("API_PORT", 8000)),
        reload=True
    )
