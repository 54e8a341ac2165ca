#!/usr/bin/env python3
"""
Initialize the PDF Vault metadata database.

Creates the ``documents`` table in the database named by DATABASE_URL
(SQLite by default, PostgreSQL via a postgresql+asyncpg URL).

Usage:
    python scripts/init_database.py            # create tables
    python scripts/init_database.py status     # show tables and row counts
    python scripts/init_database.py drop       # drop tables (asks first)

    # With environment file
    ENV_FILE=.env.production python scripts/init_database.py

Environment Variables:
    DATABASE_URL - SQLAlchemy async URL of the metadata database
"""

import asyncio
import logging
import os
import sys
from pathlib import Path

# Configure logging for CLI output
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

# Load environment variables before settings are read
from dotenv import load_dotenv

env_file = os.environ.get("ENV_FILE", ".env")
env_path = project_root / env_file
if env_path.exists():
    load_dotenv(env_path)
    logger.info(f"Loaded environment from: {env_path}")
else:
    logger.warning(f"No environment file found at: {env_path}")
    logger.info("Using system environment variables")


def _table_names(sync_conn):
    from sqlalchemy import inspect

    return inspect(sync_conn).get_table_names()


async def init_tables():
    """Create all database tables."""
    from pdf_vault.core.db_client import DatabaseManager

    db = DatabaseManager()
    logger.info("=== Metadata Database Initialization ===")

    logger.info("Creating tables...")
    try:
        await db.create_tables()
        logger.info("Tables created successfully!")
    except Exception as e:
        logger.error(f"Failed to create tables: {e}")
        logger.error("Please check DATABASE_URL")
        await db.close()
        sys.exit(1)

    logger.info("Verifying tables...")
    async with db.engine.connect() as conn:
        tables = await conn.run_sync(_table_names)

    if tables:
        logger.info("Tables in database:")
        for table_name in tables:
            logger.info(f"  - {table_name}")
    else:
        logger.warning("No tables found")

    await db.close()
    logger.info("=== Initialization Complete ===")


async def drop_tables():
    """Drop all tables (use with caution!)."""
    from pdf_vault.core.db_client import DatabaseManager

    logger.warning("=== WARNING: Dropping All Tables ===")
    logger.warning("Stored files are NOT removed; they become orphans.")

    confirm = input("Are you sure you want to drop all tables? (type 'yes' to confirm): ")
    if confirm.lower() != "yes":
        logger.info("Aborted.")
        return

    db = DatabaseManager()
    await db.drop_tables()
    logger.info("All tables dropped.")
    await db.close()


async def show_status():
    """Show database tables and row counts."""
    from sqlalchemy import func, select

    from pdf_vault.core.db_client import DatabaseManager
    from pdf_vault.models.db import DocumentModel

    db = DatabaseManager()
    logger.info("=== Database Status ===")

    if not await db.test_connection():
        logger.error("Could not connect to database")
        await db.close()
        sys.exit(1)

    async with db.engine.connect() as conn:
        tables = await conn.run_sync(_table_names)
        logger.info(f"Dialect: {conn.dialect.name}")

        if DocumentModel.__tablename__ in tables:
            count = (
                await conn.execute(select(func.count()).select_from(DocumentModel))
            ).scalar()
            logger.info(f"  - {DocumentModel.__tablename__}: {count} rows")
        else:
            logger.info("No documents table. Run 'init' to create tables.")

    await db.close()


def main():
    """Main entry point."""
    import argparse

    parser = argparse.ArgumentParser(
        description="Initialize the metadata database for PDF Vault"
    )
    parser.add_argument(
        "command",
        nargs="?",
        default="init",
        choices=["init", "drop", "status"],
        help="Command to run (default: init)"
    )

    args = parser.parse_args()

    if args.command == "init":
        asyncio.run(init_tables())
    elif args.command == "drop":
        asyncio.run(drop_tables())
    elif args.command == "status":
        asyncio.run(show_status())


if __name__ == "__main__":
    main()
