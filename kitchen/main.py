# kitchen/main.py
import logging

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.routing import APIRoute

from kitchen import __version__, database
from kitchen.config import get_settings, validate_settings
from kitchen.routers import admin, auth, meals, notifications, profile, push
from kitchen.scheduler import start_scheduler, stop_scheduler

logger = logging.getLogger(__name__)

app = FastAPI(title="Karmic Kitchen API", version=__version__)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["authorization", "x-client-info", "apikey", "content-type"],
)

app.include_router(auth.router)       # /auth/*
app.include_router(profile.router)    # /profile
app.include_router(meals.router)      # /meals/*
app.include_router(admin.router)      # /admin/*
app.include_router(push.router)       # /push/*, /sw.js
app.include_router(notifications.router)  # /notifications/*


# === Error handlers ===
@app.exception_handler(Exception)
async def unhandled_exc_handler(request: Request, exc: Exception):
    logger.exception("unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse({"error": str(exc) or exc.__class__.__name__}, status_code=500)


# === Health & HEAD ===
@app.get("/health")
def health():
    return {"ok": True}


@app.head("/")
def head_root():
    return Response(status_code=200)


# === Lifecycle ===
@app.on_event("startup")
async def _startup():
    settings = validate_settings()  # ConfigError aborts startup
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    database.configure_engine(settings.DATABASE_URL)
    database.init_db()

    if settings.ENABLE_SCHEDULER:
        start_scheduler()

    paths = sorted(r.path for r in app.routes if isinstance(r, APIRoute))
    logger.info("routes: %s", ", ".join(paths))


@app.on_event("shutdown")
async def _shutdown():
    if get_settings().ENABLE_SCHEDULER:
        stop_scheduler()
