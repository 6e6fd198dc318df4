import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.core.config import settings
from app.core.database import engine, Base
from app.core.errors import register_exception_handlers
from app.routers import (
    health,
    auth,
    projects,
    tasks,
    discussions,
    personal_todos,
    notifications,
    dashboard,
    profile,
)

logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

# Init DB
Base.metadata.create_all(bind=engine)

app = FastAPI(
    title="TeamNest API",
    version="1.0.0"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# Routes
app.include_router(health.router, prefix="/health")
for module in (auth, projects, tasks, discussions, personal_todos, notifications, dashboard, profile):
    app.include_router(module.router, prefix="/api")
