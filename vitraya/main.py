import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from vitraya.api.analysis import router as analysis_router
from vitraya.api.appointments import doctors_router
from vitraya.api.appointments import router as appointments_router
from vitraya.api.articles import router as articles_router
from vitraya.api.auth import router as auth_router
from vitraya.api.auth import session_router
from vitraya.api.chat import router as chat_router
from vitraya.api.dashboard import router as dashboard_router
from vitraya.api.quiz import router as quiz_router
from vitraya.api.settings import router as settings_router
from vitraya.core.seed import seed_reference_data
from vitraya.db import session as db_session

CORS_ORIGINS = [origin.strip() for origin in os.getenv("CORS_ORIGINS", "").split(",") if origin.strip()]

app = FastAPI(title="Vitraya Health")

if CORS_ORIGINS:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


@app.on_event("startup")
def on_startup() -> None:
    db_session.create_tables()
    db = db_session.SessionLocal()
    try:
        seed_reference_data(db)
    finally:
        db.close()


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/api")
def api_root() -> dict[str, str]:
    return {"service": "Vitraya Health API", "status": "ok"}


app.include_router(auth_router)
app.include_router(session_router)
app.include_router(quiz_router)
app.include_router(analysis_router)
app.include_router(chat_router)
app.include_router(dashboard_router)
app.include_router(doctors_router)
app.include_router(appointments_router)
app.include_router(articles_router)
app.include_router(settings_router)
