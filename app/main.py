from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.api_v1.api import api_router
from app.core.config import settings
from app.core.errors import register_exception_handlers
from app.core.logging import get_logger, setup_logging
from app.db import create_db_and_tables

setup_logging()
logger = get_logger(module="main")

app = FastAPI(title=settings.PROJECT_NAME)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

app.include_router(api_router, prefix="/api/v1")


@app.on_event("startup")
def on_startup():
    # creates the tables (and the sqlite file) if missing
    create_db_and_tables()
    logger.info("Database ready", database_url=settings.DATABASE_URL.split("@")[-1])


@app.get("/", tags=["health"])
def read_root():
    return {"message": "ok"}
