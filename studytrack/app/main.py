# StudyTrack backend entrypoint: student progress tracking API.

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from studytrack.app.api import auth
from studytrack.app.api import progress
from studytrack.app.api import students
from studytrack.app.api import subjects
from studytrack.app.api import users
from studytrack.app.core.dev_seed import seed_demo_data
from studytrack.app.core.errors import AppError, ServerError
from studytrack.app.core.log_config import configure_logging
from studytrack.app.core.settings import get_settings
from studytrack.app.db.base import Base
from studytrack.app.db.session import SessionLocal, engine

settings = get_settings()
configure_logging(settings.log_level, settings.log_json)
logger = logging.getLogger(__name__)

app = FastAPI(title=settings.app_name, version=settings.api_version)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth.router)
app.include_router(users.router)
app.include_router(students.router)
app.include_router(subjects.router)
app.include_router(progress.router)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    message = exc.message
    if isinstance(exc, ServerError) and not settings.debug:
        message = ServerError.default_message
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": message, "error": exc.error_type},
        headers=headers,
    )


@app.get("/")
def read_root():
    return {"app": "StudyTrack backend", "status": "ok"}


@app.get("/health")
def health_check():
    return {"status": "ok"}


@app.on_event("startup")
def prepare_database():
    Base.metadata.create_all(bind=engine)
    logger.info("Database ready at %s", engine.url.render_as_string(hide_password=True))
    if not settings.seed_demo_data:
        return
    db = SessionLocal()
    try:
        seed_demo_data(db)
    finally:
        db.close()
