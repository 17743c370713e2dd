#!/usr/bin/env python3
"""
Database initialization script for a tenant backend.

This script handles:
- Database creation (for PostgreSQL)
- Running Alembic migrations

Usage:
    ENV_FILE=.env.<tenant> python scripts/init_db.py [--skip-create]
"""

import os
import sys
import argparse
import subprocess
from pathlib import Path
from urllib.parse import urlparse

# add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from app.core.config import settings
from sqlalchemy import create_engine, text
import logging

# configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def create_database_if_not_exists() -> bool:
    """create the tenant db if it doesn't exist (PostgreSQL only)."""
    database_url = settings.DATABASE_URL

    if not database_url.startswith("postgresql"):
        logger.info("Database URL is not PostgreSQL, skipping database creation")
        return True

    postgres_engine = None
    try:
        parsed = urlparse(database_url)
        database_name = parsed.path[1:]

        # connect to the maintenance db; CREATE DATABASE can't run in a transaction
        postgres_url = f"{parsed.scheme}://{parsed.netloc}/postgres"
        postgres_engine = create_engine(postgres_url, isolation_level="AUTOCOMMIT")

        with postgres_engine.connect() as conn:
            result = conn.execute(
                text("SELECT 1 FROM pg_database WHERE datname = :db_name"),
                {"db_name": database_name}
            )
            if result.fetchone() is None:
                logger.info(f"Creating database: {database_name}")
                conn.execute(text(f'CREATE DATABASE "{database_name}"'))
                logger.info(f"Database {database_name} created successfully")
            else:
                logger.info(f"Database {database_name} already exists")
        return True

    except Exception as e:
        logger.error(f"Error creating database: {e}")
        return False
    finally:
        if postgres_engine is not None:
            postgres_engine.dispose()


def run_migrations() -> bool:
    """run Alembic migrations to create/update schema."""
    try:
        logger.info("Running Alembic migrations...")
        os.chdir(project_root)

        result = subprocess.run(
            [sys.executable, "-m", "alembic", "upgrade", "head"],
            capture_output=True,
            text=True,
            check=True
        )

        logger.info("Migrations completed successfully")
        logger.debug(f"Migration output: {result.stdout}")
        return True

    except subprocess.CalledProcessError as e:
        logger.error(f"Error running migrations: {e}")
        logger.error(f"Migration error output: {e.stderr}")
        return False


def main() -> int:
    parser = argparse.ArgumentParser(description="Initialize the tenant database")
    parser.add_argument("--skip-create", action="store_true", help="Don't try to create the database")
    args = parser.parse_args()

    logger.info(f"Initializing database for tenant {settings.TENANT_NAME}")
    if not args.skip_create and not create_database_if_not_exists():
        return 1
    if not run_migrations():
        return 1
    logger.info("Database initialization completed")
    return 0


if __name__ == "__main__":
    sys.exit(main())
