import logging
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from relativity_explorer.config import get_settings
from relativity_explorer.api.routes import lessons, scene, sessions
from relativity_explorer.services.ai_tutor import ai_tutor

logger = logging.getLogger(__name__)
settings = get_settings()

app = FastAPI(
    title="Relativity Explorer",
    description="Step-by-step special relativity visualization with an AI tutor",
    version="0.1.0",
)

# CORS middleware - allow multiple localhost ports for development
cors_origins = [
    settings.frontend_url,
    "http://localhost:5173",
    "http://localhost:5174",
    "http://localhost:5175",
]
app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(lessons.router, prefix="/api/lessons", tags=["Lessons"])
app.include_router(scene.router, prefix="/api/scene", tags=["Scene"])
app.include_router(sessions.router, prefix="/api/sessions", tags=["Sessions"])

# Serve exported animations
output_dir = Path(settings.output_dir)
output_dir.mkdir(parents=True, exist_ok=True)
app.mount("/output", StaticFiles(directory=str(output_dir)), name="output")

if not ai_tutor.is_configured:
    logger.warning("GEMINI_API_KEY not set - tutor requests will return the fallback message")


@app.get("/health")
async def health_check():
    return {"status": "healthy", "service": "Relativity Explorer"}


@app.get("/")
async def root():
    return {
        "message": "Relativity Explorer API",
        "docs": "/docs",
        "health": "/health",
        "tutor_configured": ai_tutor.is_configured,
    }
