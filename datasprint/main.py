import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from datasprint.config import settings
from datasprint.database import init_db
from datasprint.errors import register_error_handlers
from datasprint.routers import auth, health, posts, users
from datasprint.services.users import user_store

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
LOGGER = logging.getLogger(__name__)

app = FastAPI(title="DATASPRINT Registration Backend")

allow_any_origin = "*" in settings.cors_origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if allow_any_origin else list(settings.cors_origins),
    allow_credentials=not allow_any_origin,
    allow_methods=["*"],
    allow_headers=["*"],
)
register_error_handlers(app)

app.include_router(health.router)
app.include_router(health.router, prefix="/api")
app.include_router(auth.router, prefix="/api")
app.include_router(users.router, prefix="/api")
app.include_router(posts.router, prefix="/api")
app.include_router(auth.router)  # Compatibility for clients calling /auth/* without /api.
app.include_router(users.router)
app.include_router(posts.router)


@app.on_event("startup")
def startup() -> None:
    init_db()
    user_store.ensure_roles()
    LOGGER.info("Startup complete (env=%s)", settings.app_env)


@app.get("/")
def root():
    return {"status": "Backend running"}
