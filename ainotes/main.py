import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ainotes.core.config import settings
from ainotes.routers import health, ai, notes
from ainotes.services.session_service import SessionRegistry

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL, logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(
    title="AI Notes API",
    version="0.1.0"
)

# Sessions de notes en mémoire (durée de vie = celle du process)
app.state.sessions = SessionRegistry()

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type"],
)

# Routes
app.include_router(health.router, prefix="/health")
app.include_router(ai.router)
app.include_router(notes.router)
