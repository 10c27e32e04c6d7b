# teamboard/main.py
import logging

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from teamboard.config import settings
from teamboard.core.db import init_db, close_db
from teamboard.core.pubsub import Channel
from teamboard.services import (
    EntityCache,
    MissingSessionError,
    NotFoundError,
    ProjectService,
    SessionRegistry,
    StoreError,
    TeamService,
    TortoiseStore,
    UserService,
)
from teamboard.schemas.project import Project

from teamboard.api.v1.routers import auth, projects, teams, users
from teamboard.api.v1.routers.ws_projects import router as ws_projects_router

logger = logging.getLogger("uvicorn.error")

def wire_services(app: FastAPI) -> None:
    """
    Composition root: one store (with its change-feed channel), one project
    cache and the services sharing them, placed on app.state.
    """
    store = TortoiseStore(channel=Channel())
    cache = EntityCache(store, table="projects", model=Project)
    project_service = ProjectService(store, cache)
    user_service = UserService(store)
    app.state.store = store
    app.state.project_cache = cache
    app.state.project_service = project_service
    app.state.team_service = TeamService(store)
    app.state.user_service = user_service
    app.state.sessions = SessionRegistry(store, project_service, user_service)

async def shutdown_services(app: FastAPI) -> None:
    sessions = getattr(app.state, "sessions", None)
    if sessions is not None:
        await sessions.close_all()
    cache = getattr(app.state, "project_cache", None)
    if cache is not None:
        cache.close()

app = FastAPI(title=settings.APP_NAME)

# CORS (with Cookie)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.exception_handler(StoreError)
async def store_error_handler(request: Request, exc: StoreError):
    code = status.HTTP_404_NOT_FOUND if isinstance(exc, NotFoundError) else status.HTTP_400_BAD_REQUEST
    return JSONResponse(status_code=code, content={"detail": {"code": exc.code, "message": exc.message}})

@app.exception_handler(MissingSessionError)
async def missing_session_handler(request: Request, exc: MissingSessionError):
    return JSONResponse(status_code=status.HTTP_401_UNAUTHORIZED, content={"detail": "AUTH_REQUIRED"})

@app.on_event("startup")
async def on_startup():
    await init_db()
    wire_services(app)
    if settings.preload_project_cache:
        await app.state.project_service.initialize_cache()
    logger.info("[startup] %s ready (env=%s)", settings.APP_NAME, settings.env)

@app.on_event("shutdown")
async def on_shutdown():
    await shutdown_services(app)
    await close_db()

# REST
app.include_router(auth.router, prefix="/api/v1")
app.include_router(projects.router, prefix="/api/v1")
app.include_router(teams.router, prefix="/api/v1")
app.include_router(users.router, prefix="/api/v1")

# WebSocket
app.include_router(ws_projects_router)

@app.get("/healthz")
def healthz():
    return {"ok": True}
