from fastapi import FastAPI
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware

from kost_backoffice.api.routes import bookings
from kost_backoffice.core.errors import DocumentEngineError, PersistenceError

# ⭐ Import logging system
from kost_backoffice.core.logging_config import get_logger

logger = get_logger()

app = FastAPI(
    title="Kost Back-Office API",
    version="1.0.0",
    description="Booking lifecycle and rental document generation for kost administrators"
)

# ⭐ Request Logging Middleware
@app.middleware("http")
async def log_requests(request, call_next):
    logger.info(f"REQUEST: {request.method} {request.url.path}")

    try:
        response = await call_next(request)
        logger.info(f"RESPONSE: {response.status_code} {request.url.path}")
        return response

    except Exception as e:
        logger.error(f"ERROR: {request.url.path} -> {str(e)}")
        raise e


# ⭐ Engine errors raised outside a result-returning service (e.g. database down on lookup)
@app.exception_handler(DocumentEngineError)
async def engine_error_handler(request, exc: DocumentEngineError):
    logger.error(f"ENGINE ERROR: {request.url.path} -> {exc.message}")
    status_code = 503 if isinstance(exc, PersistenceError) else 500
    return JSONResponse(status_code=status_code, content={"detail": exc.message})


# ⭐ CORS (admin dashboard runs on its own origin)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(bookings.router)

@app.get("/", tags=["Root"])
def root():
    return {"message": "Backend running successfully"}
