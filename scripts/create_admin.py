#!/usr/bin/env python3
"""
Create or update the superadmin account of a tenant.

Running it again with the same values leaves exactly one account for the
email. The target account can be overridden with ADMIN_EMAIL,
ADMIN_PASSWORD and ADMIN_FIRST_NAME.

Usage:
    ENV_FILE=.env.<tenant> python scripts/create_admin.py
"""

import os
import sys
from pathlib import Path

# add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from app.core.config import settings
from app.db.session import build_engine, build_session_factory
from app.services.admin import create_admin
import logging

# configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

ADMIN_EMAIL = os.getenv("ADMIN_EMAIL", "admin@storefront.de")
ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD", "ChangeMe1234.")
ADMIN_FIRST_NAME = os.getenv("ADMIN_FIRST_NAME", "Admin")


def run() -> int:
    engine = None
    db = None
    try:
        engine = build_engine()
        db = build_session_factory(engine)()
        admin = create_admin(db, ADMIN_EMAIL, ADMIN_PASSWORD, ADMIN_FIRST_NAME)

        logger.info("Admin created successfully")
        logger.info(f"Email: {admin.email}")
        logger.info(f"Name: {admin.first_name}")
        logger.info(f"Role: {admin.role}")
        logger.info(f"Log in at {settings.FRONTEND_URL}/admin/login")
        return 0

    except Exception as e:
        logger.exception(f"Error creating admin: {e}")
        return 1
    finally:
        if db is not None:
            db.close()
        if engine is not None:
            engine.dispose()


if __name__ == "__main__":
    sys.exit(run())
