import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from worldnotes.api.http.health import router as health_router
from worldnotes.api.http.notes import router as notes_router
from worldnotes.core.config import settings
from worldnotes.core.errors import AppError
from worldnotes.core.log import configure_logging

configure_logging()
logger = logging.getLogger(__name__)

app = FastAPI(
    title="WorldNotes",
    description="Campaign notes with edit locking and version history",
    version="1.0.0"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    if exc.code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=exc.code, content=exc.to_dict())


app.include_router(health_router)
app.include_router(notes_router)


@app.get("/")
async def root():
    return {
        "message": "WorldNotes API",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/health"
    }
