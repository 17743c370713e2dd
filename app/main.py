import logging
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.orm import sessionmaker

from app.core.config import settings
from app.db.session import build_engine, build_session_factory
from app.api.v1.api import router as api_v1_router
from app.services.email.email_sender import health_check as email_health_check
from app.services.uploads import PdfUploadGate

logger = logging.getLogger(__name__)


def create_app(
    session_factory: Optional[sessionmaker] = None,
    upload_gate: Optional[PdfUploadGate] = None,
) -> FastAPI:
    """build the app for the current tenant; run with `uvicorn app.main:create_app --factory`."""
    app = FastAPI(title=f"Storefront API ({settings.TENANT_NAME})", version="0.1.0")

    # db's handled by alembic migrations; run 'alembic upgrade head' or scripts/init_db.py
    engine = None
    if session_factory is None:
        engine = build_engine()
        session_factory = build_session_factory(engine)
    app.state.session_factory = session_factory

    if upload_gate is None:
        upload_gate = PdfUploadGate(settings.UPLOAD_PATH, slot_policy=settings.UPLOAD_SLOT_POLICY)
    upload_gate.ensure_directory()
    app.state.pdf_upload_gate = upload_gate

    # set up CORS so the frontend can talk to us
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS or ["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(api_v1_router, prefix="/api/v1")

    @app.on_event("shutdown")
    def on_shutdown():
        if engine is not None:
            engine.dispose()

    @app.get("/health")
    def health():
        return {
            "status": "ok",
            "env": settings.APP_ENV,
            "tenant": settings.TENANT_NAME,
            "email": email_health_check(),
        }

    logger.info(f"App created for tenant {settings.TENANT_NAME}")
    return app
