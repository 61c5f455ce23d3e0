# Imports from standard library or third-party packages
import logging
import time

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# Imports from this project
from create_admin import ensure_admin_account
from database import create_mongo_client, ensure_indexes
from errors import register_exception_handlers
from routers import auth, leads
from utils.lead_workflow import LeadWorkflow
from utils.logger import request_logger, setup_logging
from utils.user_workflow import UserWorkflow

logger = logging.getLogger(__name__)

API_VERSION = "1.0.0"


def create_app(settings, mongo_client=None):
    """Crée et configure l'instance de l'application FastAPI."""
    setup_logging(settings)

    app = FastAPI(
        title="Leopay API",
        description="API de suivi des leads et du parcours des apporteurs Leopay",
        version=API_VERSION,
    )

    client = mongo_client or create_mongo_client(settings)
    db = client[settings.mongo_db_name]

    app.state.settings = settings
    app.state.mongo_client = client
    app.state.db = db
    app.state.user_workflow = UserWorkflow(db, settings)
    app.state.lead_workflow = LeadWorkflow(db)
    app.state.started_at = time.monotonic()

    # Événements de démarrage: le compte admin doit exister avant de servir des requêtes
    @app.on_event("startup")
    def on_startup():
        ensure_indexes(db)
        ensure_admin_account(db, settings)
        logger.info("Serveur démarré en mode %s", settings.env)

    @app.on_event("shutdown")
    def on_shutdown():
        if mongo_client is None:
            client.close()

    # Configuration CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins(),
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "X-Requested-With", "Accept"],
        max_age=86400,
    )
    app.middleware("http")(request_logger)

    register_exception_handlers(app, settings)

    # Inclusion des routeurs
    app.include_router(auth.router, prefix="/api/auth", tags=["Authentication"])
    app.include_router(leads.router, prefix="/api/leads", tags=["Leads"])

    @app.get("/health", tags=["Root"])
    def health():
        return {
            "status": "ok",
            "uptime": time.monotonic() - app.state.started_at,
            "timestamp": int(time.time() * 1000),
        }

    @app.get("/", tags=["Root"])
    def read_root():
        return {
            "success": True,
            "message": "Leopay API is running",
            "environment": settings.env,
            "version": API_VERSION,
        }

    return app
