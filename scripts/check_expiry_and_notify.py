#!/usr/bin/env python3
"""
Daily MHD expiry check.

Finds already processed products whose best-before date is today and mails
every admin. Meant to run once a day per tenant (e.g. cron at 23:00):

    ENV_FILE=.env.<tenant> python scripts/check_expiry_and_notify.py

Exit code 0 on success, 1 on any failure.
"""

import sys
from datetime import datetime
from pathlib import Path

# add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from app.core.config import settings
from app.db.session import build_engine, build_session_factory
from app.services.expiry import check_expired_products_and_notify_admins
import logging

# configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def run() -> int:
    logger.info(f"Starting MHD expiry check for tenant {settings.TENANT_NAME}")
    logger.info(f"Date: {datetime.now().strftime('%d.%m.%Y %H:%M')}")

    engine = None
    db = None
    try:
        engine = build_engine()
        db = build_session_factory(engine)()
        result = check_expired_products_and_notify_admins(db)

        if result.success:
            logger.info(f"Success: {result.message}")
            logger.info(f"Products processed: {result.count}")
            if result.email_results is not None:
                sent = sum(1 for r in result.email_results if r["success"])
                logger.info(f"Mail sent to {sent}/{len(result.email_results)} admins")
            return 0

        logger.error(f"Failed: {result.message}")
        if result.error:
            logger.error(f"Detail: {result.error}")
        return 1

    except Exception as e:
        logger.exception(f"Unexpected error: {e}")
        return 1
    finally:
        if db is not None:
            db.close()
        if engine is not None:
            engine.dispose()


if __name__ == "__main__":
    sys.exit(run())
