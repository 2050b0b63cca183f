#!/usr/bin/env python3
"""
Create database tables using SQLModel.
"""

import logging

from sqlalchemy import inspect
from sqlmodel import SQLModel

from lvlai_api.database import db
from lvlai_api.models import Task, User  # noqa: F401  (registers the tables)

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def create_tables():
    """Create all database tables"""
    try:
        logger.info("Creating database tables...")
        engine = db.get_engine()

        SQLModel.metadata.create_all(engine)
        logger.info("✅ All tables created successfully!")

        tables = inspect(engine).get_table_names()
        logger.info(f"Tables: {tables}")

    except Exception as e:
        logger.error(f"❌ Failed to create tables: {e}")
        raise


if __name__ == "__main__":
    create_tables()
